"""Route registry for data sources mounted under the badge data prefix.

Each data source registers a handler under a route name while the application
is being assembled. ``Registry.build_handler`` then seals the registry into an
immutable snapshot so request dispatch never takes a lock.

A request for ``/<prefix>/<name>/...`` is passed, unmodified, to the handler
registered as ``<name>``.
"""

from __future__ import annotations

import threading
from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType

from starlette.requests import Request
from starlette.responses import Response

from badgedata.errors import RoutingError, error_response
from badgedata.lib.logger import get_logger

Handler = Callable[[Request], Awaitable[Response]]

logger = get_logger(__name__)


class Registry:
    """Route name to handler mapping, open for registration until sealed."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._routes: dict[str, Handler] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        with self._lock:
            return self._sealed

    def register(self, name: str, handler: Handler) -> None:
        """Attach ``handler`` under ``name``; a later registration under the same name wins.

        Registrations made after ``build_handler`` are stored but are not seen by
        dispatchers that were already built.
        """

        if not name:
            raise ValueError("route name must not be empty")

        with self._lock:
            replaced = name in self._routes
            self._routes[name] = handler
            sealed = self._sealed

        if sealed:
            logger.warning("registry.register.after_seal", extra={"route": name})
        else:
            logger.info("registry.register", extra={"route": name, "replaced": replaced})

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._routes)

    def build_handler(self) -> Handler:
        """Seal the registry and return a dispatch callable over a snapshot of the routes."""

        with self._lock:
            snapshot = MappingProxyType(dict(self._routes))
            self._sealed = True

        logger.info("registry.sealed", extra={"routes": sorted(snapshot)})
        return Dispatcher(snapshot).dispatch


class Dispatcher:
    """Lock-free dispatch over an immutable route snapshot."""

    def __init__(self, routes: Mapping[str, Handler]) -> None:
        self._routes = routes

    def resolve(self, path: str) -> Handler:
        segments = path.split("/")
        if len(segments) < 3:
            raise RoutingError("missing path segments")

        route = segments[2]
        handler = self._routes.get(route)
        if handler is None:
            raise RoutingError(f"not found: {route}")
        return handler

    async def dispatch(self, request: Request) -> Response:
        try:
            handler = self.resolve(request.url.path)
        except RoutingError as exc:
            return error_response(exc.message, exc.status_code)
        return await handler(request)
