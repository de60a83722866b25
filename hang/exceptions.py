"""
hang: Custom Exception Hierarchy
===================================

What:  Defines the errors raised by the route registry and the body extractor.
How:   Each exception class carries a message, an optional context dict and
       the HTTP status it maps to. The dispatcher turns request errors into
       plain-text responses; registry errors are raised to the configuring code.
Who:   Raised by registry.py and body.py; caught by dispatcher.py.

Exception Hierarchy:
    HangError (base)
    ├── RegistryError
    │   ├── DuplicateRouteError    → configuration time, never sent to clients
    │   └── RouteNotFoundError     → configuration time, never sent to clients
    └── RequestBodyError
        ├── MissingBodyError       → 400 Bad Request
        ├── BodyReadError          → 500 if already consumed, else 400
        └── JSONDecodeError        → 400 Bad Request

Contract for handlers:
    A raised RequestBodyError means "the response is already decided".
    Handlers let it propagate; they must not write their own response after it.
"""

from typing import Any, Dict, Optional


class HangError(Exception):
    """
    Base exception for all hang errors.

    Attributes:
        message:      Human-readable description (written to the response body
                      for request errors)
        context:      Additional debug info (logged, not returned to clients)
        status_code:  HTTP status used when the error becomes a response
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.context = context or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


# ══════════════════════════════════════════════════════════════════════════
# Registry Errors
# ══════════════════════════════════════════════════════════════════════════


class RegistryError(HangError):
    """Raised by the route registry on add/modify conflicts."""


class DuplicateRouteError(RegistryError):
    """
    Raised when adding a route that is already registered.

    The existing handler stays bound; use modify_route() to replace it.
    """

    def __init__(self, route: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["route"] = route
        super().__init__(message=f"Route {route} already exists.", context=ctx)
        self.route = route


class RouteNotFoundError(RegistryError):
    """Raised when modifying a route that was never registered."""

    def __init__(self, route: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["route"] = route
        super().__init__(message=f"Route {route} does not exist.", context=ctx)
        self.route = route


# ══════════════════════════════════════════════════════════════════════════
# Request Body Errors
# ══════════════════════════════════════════════════════════════════════════


class RequestBodyError(HangError):
    """Base for failures while extracting a request body. Terminal for the request."""

    status_code = 400


class MissingBodyError(RequestBodyError):
    """
    Raised when the request carries no body.

    HTTP: 400 Bad Request
    """

    def __init__(
        self,
        message: str = "Request body is missing",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BodyReadError(RequestBodyError):
    """
    Raised when the underlying body stream cannot be read.

    HTTP: 500 when the stream was already consumed by someone else (a server
          side bug), 400 for any other read failure such as a client
          disconnecting mid-upload.
    """

    def __init__(
        self,
        message: str = "Request body could not be read",
        consumed: bool = False,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["consumed"] = consumed
        super().__init__(
            message=message,
            context=ctx,
            status_code=500 if consumed else 400,
        )
        self.consumed = consumed


class JSONDecodeError(RequestBodyError):
    """
    Raised when the body is not valid JSON or does not match the target type.

    HTTP: 400 Bad Request
    """

    def __init__(
        self,
        message: str = "Request body is not valid JSON",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
