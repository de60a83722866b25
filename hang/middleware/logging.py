"""
hang: Request Logging Middleware
===================================

What:  One access log line per HTTP request.
How:   Measures time around the downstream call and logs a "request" line
       through a FieldLogger whose fields are the method, path, status,
       duration, request ID and client address. The level follows the
       status class: 5xx ERROR, 4xx WARNING, otherwise INFO.
Who:   Added to every app by main.create_app(), inside RequestIDMiddleware.

Liveness probes are not logged: they arrive every few seconds and the
livecheck handler already logs at DEBUG.

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, client, request ID
    ❌ Don't log: request bodies, headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from hang.logger import get_logger
from hang.middleware.request_id import request_id_var
from hang.registry import LIVECHECK_ROUTE, normalize_route

ACCESS_LOGGER_NAME = "hang.access"


def access_level(status: int) -> int:
    """5xx ERROR, 4xx WARNING, anything else INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request through a FieldLogger carrying the request's fields."""

    def __init__(self, app, logger_name: str = ACCESS_LOGGER_NAME):
        super().__init__(app)
        self.log = get_logger(logger_name)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if normalize_route(request.url.path) == LIVECHECK_ROUTE:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        log = self.log.with_fields(
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=elapsed_ms,
            request_id=request_id_var.get(""),
            client_ip=request.client.host if request.client else "unknown",
        )
        log.log(access_level(response.status_code), "request")
        return response
