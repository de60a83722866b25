"""
hang: Middleware Package
===========================

What:  Cross-cutting concerns applied to every request before the Dispatcher.

Middleware Chain:
    Request → [Request ID] → [Logging] → Dispatcher

    The order is reversed for responses, so the access log line carries the
    request ID and the final status code.
"""

from hang.middleware.logging import RequestLoggingMiddleware
from hang.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var

__all__ = [
    "REQUEST_ID_HEADER",
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "request_id_var",
]
