"""
hang: Route Registry
======================

What:  Maps normalized route strings to handlers.
How:   Copy-on-write snapshot: every mutation builds a new dict under a lock
       and swaps the reference; lookups read the current snapshot without
       locking. Routes can therefore be added or removed while requests are
       being served from the event loop or from threadpool workers.
Who:   Owned by Service; read by Dispatcher.

Normalization:
    Every "/" is removed and case is preserved, both when a route is
    registered and when a request path is matched:

        "/livecheck"   → "livecheck"
        "/v1/users/"   → "v1users"
        "/LiveCheck"   → "LiveCheck"   (does not match "livecheck")
"""

import threading
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterator, Mapping, Optional, Union

from starlette.requests import Request
from starlette.responses import Response

from hang.exceptions import DuplicateRouteError, RouteNotFoundError

# Sync handlers run in the threadpool; async handlers are awaited on the loop
HandlerFunc = Callable[[Request], Union[Response, Awaitable[Response]]]

DEFAULT_ROUTE = "default"
LIVECHECK_ROUTE = "livecheck"


def normalize_route(path: str) -> str:
    """Strip every slash from `path`. Case is kept."""
    return path.replace("/", "")


@dataclass(frozen=True)
class Route:
    """A registered route: normalized path, handler name for logs, handler."""

    path: str
    name: str
    handler: HandlerFunc


class RouteRegistry:
    """Route → handler mapping with add / modify / delete and existence checks."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._routes: Mapping[str, Route] = {}

    def add_route(self, route: str, name: str, handler: HandlerFunc) -> Route:
        """Register `handler` under `route`. Raises DuplicateRouteError if taken."""
        key = normalize_route(route)
        with self._lock:
            if key in self._routes:
                raise DuplicateRouteError(key)
            entry = Route(path=key, name=name, handler=handler)
            routes = dict(self._routes)
            routes[key] = entry
            self._routes = routes
        return entry

    def modify_route(self, route: str, name: str, handler: HandlerFunc) -> Route:
        """Replace the handler of an existing route. Raises RouteNotFoundError if absent."""
        key = normalize_route(route)
        with self._lock:
            if key not in self._routes:
                raise RouteNotFoundError(key)
            entry = Route(path=key, name=name, handler=handler)
            routes = dict(self._routes)
            routes[key] = entry
            self._routes = routes
        return entry

    def delete_route(self, route: str) -> None:
        """Unregister `route`. Deleting an unknown route is a no-op."""
        key = normalize_route(route)
        with self._lock:
            if key not in self._routes:
                return
            routes = dict(self._routes)
            del routes[key]
            self._routes = routes

    def lookup(self, path: str) -> Optional[Route]:
        """Return the route matching the normalized `path`, or None."""
        return self._routes.get(normalize_route(path))

    def get(self, route: str, default: Any = None) -> Any:
        return self._routes.get(normalize_route(route), default)

    def routes(self) -> Dict[str, Route]:
        """A copy of the current route table."""
        return dict(self._routes)

    def __contains__(self, route: object) -> bool:
        return isinstance(route, str) and normalize_route(route) in self._routes

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)
