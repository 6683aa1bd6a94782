"""Routing engine contract and the in-memory route table.

The registrar builds routes against any object satisfying RoutingEngine.
GroupingEngine implements the group() attribute stacking (prefix,
middleware, namespace) once; RouteTable records the resulting routes as
plain data, and the FastAPI adapter registers them on an APIRouter.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, Union

from fastapi_resource_routing.core.options import NAMESPACE_DELIMITER

logger = logging.getLogger(__name__)

# Separates a middleware name from its parameters: "api-scope:users"
MIDDLEWARE_PARAMETER_DELIMITER = ":"

# Separates middleware parameters: "throttle:60,1"
MIDDLEWARE_PARAMETER_SEPARATOR = ","

# A handler reference ("app.controllers.Users@read") or a callable endpoint
Handler = Union[str, Callable[..., Any]]

# Route action: a bare handler or {"uses": handler, "middleware": [...]}
RouteAction = Union[Handler, Mapping[str, Any]]


class RoutingEngine(Protocol):
    """Routing engine collaborator consumed by ResourceRouter."""

    def group(self, attributes: Mapping[str, Any], callback: Callable[[Any], Any]) -> None: ...

    def get(self, path: str, action: RouteAction) -> None: ...

    def post(self, path: str, action: RouteAction) -> None: ...

    def patch(self, path: str, action: RouteAction) -> None: ...

    def delete(self, path: str, action: RouteAction) -> None: ...


@dataclass(frozen=True)
class RouteDefinition:
    """A concrete route produced by the engine.

    Attributes:
        method: HTTP method (uppercase).
        path: Full URL path including every group prefix (e.g. /users/{id}).
        handler: Namespace-qualified handler reference, or a callable.
        middleware: Middleware tokens, outermost group first.
    """

    method: str
    path: str
    handler: Handler
    middleware: tuple[str, ...] = ()


@dataclass(frozen=True)
class _GroupScope:
    """Accumulated attributes of the currently open groups."""

    prefix: str = ""
    middleware: tuple[str, ...] = ()
    namespace: str = ""


def parse_middleware(token: str) -> tuple[str, tuple[str, ...]]:
    """Split a middleware token into its name and parameters.

    Examples:
        "auth" -> ("auth", ())
        "api-scope:users" -> ("api-scope", ("users",))
        "throttle:60,1" -> ("throttle", ("60", "1"))
    """
    name, _, params = token.partition(MIDDLEWARE_PARAMETER_DELIMITER)
    if not params:
        return name, ()
    return name, tuple(params.split(MIDDLEWARE_PARAMETER_SEPARATOR))


def normalize_middleware(middleware: str | Sequence[str] | None) -> tuple[str, ...]:
    """Normalize a middleware attribute to a tuple of tokens."""
    if middleware is None:
        return ()
    if isinstance(middleware, str):
        return (middleware,)
    return tuple(middleware)


def join_path(*parts: str) -> str:
    """Join path fragments into a normalized URL path.

    Examples:
        join_path("users", "/{id}") -> "/users/{id}"
        join_path("auth", "login") -> "/auth/login"
        join_path("users", "") -> "/users"
        join_path("", "") -> "/"
    """
    segments = [part.strip("/") for part in parts if part and part.strip("/")]
    return "/" + "/".join(segments)


def join_namespace(outer: str, inner: str) -> str:
    """Join two namespaces with the namespace delimiter."""
    if outer and inner:
        return f"{outer}{NAMESPACE_DELIMITER}{inner}"
    return outer or inner


class GroupingEngine(ABC):
    """Base routing engine implementing nested route groups.

    Subclasses implement _register() to store or mount each route.
    """

    def __init__(self) -> None:
        self._scope = _GroupScope()

    def group(self, attributes: Mapping[str, Any], callback: Callable[[Any], Any]) -> None:
        """Open a group whose routes inherit prefix, middleware and namespace.

        Args:
            attributes: Mapping with optional "prefix", "middleware" and
                "namespace" keys.
            callback: Called with this engine; routes registered inside
                inherit the group attributes.
        """
        outer = self._scope
        self._scope = _GroupScope(
            prefix=join_path(outer.prefix, attributes.get("prefix") or ""),
            middleware=(*outer.middleware, *normalize_middleware(attributes.get("middleware"))),
            namespace=join_namespace(outer.namespace, attributes.get("namespace") or ""),
        )
        try:
            callback(self)
        finally:
            self._scope = outer

    def get(self, path: str, action: RouteAction) -> None:
        self.add_route("GET", path, action)

    def post(self, path: str, action: RouteAction) -> None:
        self.add_route("POST", path, action)

    def put(self, path: str, action: RouteAction) -> None:
        self.add_route("PUT", path, action)

    def patch(self, path: str, action: RouteAction) -> None:
        self.add_route("PATCH", path, action)

    def delete(self, path: str, action: RouteAction) -> None:
        self.add_route("DELETE", path, action)

    def options(self, path: str, action: RouteAction) -> None:
        self.add_route("OPTIONS", path, action)

    def add_route(self, method: str | Sequence[str], path: str, action: RouteAction) -> None:
        """Register a route for one or more HTTP methods within the current group."""
        methods = [method] if isinstance(method, str) else list(method)

        if isinstance(action, Mapping):
            handler = action.get("uses")
            route_middleware = normalize_middleware(action.get("middleware"))
        else:
            handler = action
            route_middleware = ()

        if handler is None:
            raise TypeError(f"Route action for {path!r} has no 'uses' handler")

        if isinstance(handler, str):
            handler = join_namespace(self._scope.namespace, handler)

        full_path = join_path(self._scope.prefix, path)
        for each in methods:
            definition = RouteDefinition(
                method=each.upper(),
                path=full_path,
                handler=handler,
                middleware=(*self._scope.middleware, *route_middleware),
            )
            self._register(definition)
            logger.debug(
                "Registered route",
                extra={
                    "method": definition.method,
                    "path": definition.path,
                    "handler": str(definition.handler),
                },
            )

    @abstractmethod
    def _register(self, definition: RouteDefinition) -> None: ...


class RouteTable(GroupingEngine):
    """Routing engine that records routes as RouteDefinition data.

    Example:
        table = RouteTable()
        router = ResourceRouter(table)
        router.resource("users", "UserController")
        [(r.method, r.path) for r in table]
        # [("GET", "/users"), ("POST", "/users"), ("GET", "/users/{id}"), ...]
    """

    def __init__(self) -> None:
        super().__init__()
        self._routes: list[RouteDefinition] = []

    @property
    def routes(self) -> tuple[RouteDefinition, ...]:
        return tuple(self._routes)

    def find(self, method: str, path: str) -> list[RouteDefinition]:
        """Return every route registered for a method and path."""
        return [r for r in self._routes if r.method == method.upper() and r.path == path]

    def _register(self, definition: RouteDefinition) -> None:
        self._routes.append(definition)

    def __iter__(self) -> Iterator[RouteDefinition]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)
