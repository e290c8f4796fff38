"""
ViewSet: Request-Scoped Session Cleanup
========================================

What:  Closes an AsyncSession still cached on request.state when the
       response is done.
Why:   ViewSet endpoints close their manager's session themselves. Plain
       FastAPI routes that borrow a session through
       SQLAlchemyManager.get_session rely on this middleware instead.
How:   After the downstream app returns (or raises), looks up the configured
       state key and closes the session if one is still there. Rollback of
       any uncommitted work happens as part of close().
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from viewset.config import settings

logger = logging.getLogger(__name__)


class DBSessionMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, state_key: str = settings.db_session_state_key):
        super().__init__(app)
        self.state_key = state_key

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        finally:
            session = getattr(request.state, self.state_key, None)
            if isinstance(session, AsyncSession):
                await session.close()
                logger.debug("Closed request session '%s'", self.state_key)
