"""
hang: Dispatcher
===================

What:  Routes an incoming request to the handler registered for its path.
How:   Normalize the path, look it up in the RouteRegistry, invoke the
       handler (awaited if async, threadpool if sync), fall back to the
       `default` route when nothing matches.
Who:   Mounted by main.create_app() as the app's only endpoint.

Error handling:
    HangError raised by a handler  → logged at INFO with route fields,
                                     answered with its status + message
    Any other exception            → logged at ERROR with traceback,
                                     answered with a generic 500
    Handler result not a Response  → logged at ERROR,
                                     answered with a generic 500
    Nothing escapes to the server; the dispatcher holds no locks of its own.
"""

import inspect
from typing import Any, Optional

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from hang.exceptions import HangError
from hang.logger import Logger, get_logger
from hang.registry import DEFAULT_ROUTE, Route, RouteRegistry, normalize_route


class Dispatcher:
    """Matches requests against a RouteRegistry and invokes the handler."""

    def __init__(self, registry: RouteRegistry, log: Optional[Logger] = None):
        self.registry = registry
        self.log = log if log is not None else get_logger()

    async def handle(self, request: Request) -> Response:
        path = normalize_route(request.url.path)
        route = self.registry.lookup(path)
        if route is None:
            route = self.registry.get(DEFAULT_ROUTE)
            if route is None:
                # default was deleted; answer the way it would
                self.log.debug("Route not found: %s", path)
                return PlainTextResponse(f"Route not found: {path}", status_code=400)

        log = self.log.with_fields(route=route.path, function=route.name)
        log.debug("dispatch")
        try:
            result = await self._invoke(route, request)
        except HangError as exc:
            log.info(exc.message)
            return error_response(exc)
        except Exception:
            log.error("Unhandled error in handler", exc_info=True)
            return PlainTextResponse("Internal Server Error", status_code=500)

        if not isinstance(result, Response):
            log.error("Handler returned %s instead of a Response", type(result).__name__)
            return PlainTextResponse("Internal Server Error", status_code=500)
        return result

    @staticmethod
    async def _invoke(route: Route, request: Request) -> Any:
        if inspect.iscoroutinefunction(route.handler):
            return await route.handler(request)
        result = await run_in_threadpool(route.handler, request)
        if inspect.isawaitable(result):
            result = await result
        return result


def error_response(exc: HangError) -> Response:
    """Plain-text response for a HangError: its status and its message."""
    return PlainTextResponse(exc.message, status_code=exc.status_code)
