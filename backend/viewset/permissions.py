"""Built-in permission checkers."""

from starlette.requests import Request

from viewset.interfaces import PermissionChecker


class AllowAny(PermissionChecker):
    """Allows every action. The default when a ViewSet has no checker."""

    async def check(self, action: str, request: Request) -> None:
        return None
