"""
LinkUp Backend: Request Logging Middleware
============================================

What:  One access log line per request: method, route, status, duration,
       request ID and client IP.
How:   The line names the matched route template
       (`/public/uploads/{filename}`), not the raw URL, so uploaded file names
       and other client-chosen path segments never reach the access log and
       lines for the same endpoint group together. Requests that match no
       route are logged as "<unmatched>".
       Log level follows the status class (5xx ERROR, 4xx WARNING, else INFO).

Never logged: query strings (userId, search terms), request bodies
(passwords, tokens, profile data), uploaded file contents, Authorization
headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from linkup.middleware.request_id import request_id_var

logger = logging.getLogger("linkup.access")

UNMATCHED_ROUTE = "<unmatched>"


def route_template(request: Request) -> str:
    """
    Path template of the route that handled `request`.

    The router records the matched route in the (shared) ASGI scope, so this
    is only meaningful after the downstream app has run.
    """
    route = request.scope.get("route")
    if route is None:
        return UNMATCHED_ROUTE
    return getattr(route, "path_format", None) or getattr(route, "path", UNMATCHED_ROUTE)


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes the access log, keyed by route template."""

    # Probed every few seconds
    SKIPPED_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.SKIPPED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        route = route_template(request)
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            route,
            response.status_code,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "route": route,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
