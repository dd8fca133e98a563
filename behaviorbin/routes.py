"""Ordered route table and the dispatcher walking it.

The first route whose predicate matches the request path owns the request,
even if its handler then rejects it. Parameterized routes take exactly one
path segment after their prefix (``/status/404``); any other shape under a
known prefix is a 404 raised here, before the handler runs.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from fastapi import Request, Response

from .behaviors import Behaviors
from .errors import RouteMismatch

Handler = Callable[..., Awaitable[Response]]


@dataclass(frozen=True)
class Route:
    name: str
    path: Optional[str]
    handler: str
    parameterized: bool = False

    @classmethod
    def exact(cls, name: str, path: str, handler: str) -> "Route":
        return cls(name, path, handler)

    @classmethod
    def prefix(cls, name: str, path: str, handler: str) -> "Route":
        return cls(name, path, handler, parameterized=True)

    @classmethod
    def fallback(cls, name: str, handler: str) -> "Route":
        return cls(name, None, handler)

    def matches(self, path: str) -> bool:
        if self.path is None:
            return True
        if self.parameterized:
            return path.startswith(self.path + "/")
        return path == self.path

    def segment(self, path: str) -> str:
        """The single parameter segment, or RouteMismatch."""
        parts = path.split("/")
        if len(parts) != 3 or not parts[2]:
            raise RouteMismatch()
        return parts[2]


ROUTES: List[Route] = [
    Route.prefix("status", "/status", "status"),
    Route.prefix("delay", "/delay", "delay"),
    Route.prefix("bytes", "/bytes", "random_bytes"),
    Route.exact("cache", "/cache", "cache"),
    Route.prefix("cache-for", "/cache", "cache_for"),
    Route.exact("anything", "/anything", "anything"),
    Route.exact("user-agent", "/user-agent", "user_agent"),
    Route.exact("ip", "/ip", "ip"),
    Route.exact("bearer", "/bearer", "bearer"),
    Route.prefix("redirect", "/redirect", "redirect"),
    Route.exact("unstable", "/unstable", "unstable"),
    Route.exact("index", "/", "index"),
    Route.fallback("static", "static"),
]


class Dispatcher:
    def __init__(self, behaviors: Behaviors, routes: Optional[List[Route]] = None):
        self.behaviors = behaviors
        self.routes = list(ROUTES if routes is None else routes)

    def resolve(self, path: str) -> Route:
        for route in self.routes:
            if route.matches(path):
                return route
        raise RouteMismatch()

    async def dispatch(self, request: Request) -> Response:
        path = request.url.path
        route = self.resolve(path)
        request.state.route = route.name
        handler: Handler = getattr(self.behaviors, route.handler)
        if route.parameterized:
            return await handler(request, route.segment(path))
        return await handler(request)
