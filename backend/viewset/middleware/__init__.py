"""
ViewSet: Middleware Package
============================

What:  Cross-cutting concerns applied to every request of the demo app.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [DB Session] → Route Handler

    1. Request ID: correlation id for every log line of the request
    2. Logging: one access-log line with status and duration
    3. DB Session: closes the session a SQLAlchemyManager cached on
       request.state once the response is produced
"""
