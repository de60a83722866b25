"""
hang: Service
================

What:  The object a microservice builds once at start: its names, its logger,
       its route registry and the dispatcher reading it.
How:   Construction seeds the registry with the two reserved routes
       (`default` and `livecheck`); the owning code then adds its own routes
       before serving traffic.
Who:   Created by the service's entry point; handed to main.create_app().

Example:
    service = Service(process_name="billing")
    service.add_route("/invoices", "list_invoices", list_invoices)
    app = create_app(service)
"""

import os
import sys
from typing import Optional

from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from hang.dispatcher import Dispatcher
from hang.logger import Logger, get_logger
from hang.registry import (
    DEFAULT_ROUTE,
    LIVECHECK_ROUTE,
    HandlerFunc,
    Route,
    RouteRegistry,
    normalize_route,
)


class Service:
    """
    Core data of a hang service: logger, routes, names.

    Attributes:
        log:           Logger used by the dispatcher and built-in handlers
        registry:      Route → handler mapping
        dispatcher:    Request router over `registry`
        exec_name:     Name of the called process (sys.argv[0])
        process_name:  Nice name given by the user, exec_name when empty
    """

    def __init__(self, log: Optional[Logger] = None, process_name: str = ""):
        self.log = log if log is not None else get_logger()
        self.exec_name = sys.argv[0] if sys.argv and sys.argv[0] else os.path.basename(sys.executable)
        self.process_name = process_name or self.exec_name

        self.registry = RouteRegistry()
        self.dispatcher = Dispatcher(self.registry, self.log)

        self.add_route(DEFAULT_ROUTE, "route_not_set", self.route_not_set)
        self.add_route(LIVECHECK_ROUTE, "live_check", self.live_check)

    def set_process_name(self, name: str) -> None:
        """Set the nice user defined service name."""
        self.process_name = name or self.exec_name

    # ── Route management ──────────────────────────────────────────────────

    def add_route(self, route: str, name: str, handler: HandlerFunc) -> Route:
        """Register a handler for a route. Raises DuplicateRouteError."""
        return self.registry.add_route(route, name, handler)

    def modify_route(self, route: str, name: str, handler: HandlerFunc) -> Route:
        """Register a new handler for an existing route. Raises RouteNotFoundError."""
        return self.registry.modify_route(route, name, handler)

    def delete_route(self, route: str) -> None:
        """Unregister a route."""
        self.registry.delete_route(route)

    # ── Built-in handlers ─────────────────────────────────────────────────

    async def route_not_set(self, request: Request) -> Response:
        """Default handler for paths with no handler registered."""
        path = normalize_route(request.url.path)
        self.log.debug("Route not found: %s", path)
        return PlainTextResponse(f"Route not found: {path}", status_code=400)

    async def live_check(self, request: Request) -> Response:
        """Minimum healthy check for the service."""
        self.log.debug("LiveCheck invoked")
        return PlainTextResponse("OK", status_code=200)
