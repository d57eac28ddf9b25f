"""
LinkUp Backend: Request ID Middleware
=======================================

What:  Assigns an ID to each request and echoes it in the X-Request-ID header.
Why:   Every log line and error body for one request carries the same ID, so
       a client-reported ID leads straight to the server-side log entries.
How:   Uses the client's X-Request-ID when present, otherwise a short UUID;
       stores it in a ContextVar (coroutine-local) and on request.state.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ContextVar, not threading.local: concurrent requests share one thread
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that assigns a unique ID to each request for tracing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 chars is enough for correlation and stays readable in logs
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
