"""FastAPI routing engine.

Mounts the routes built by ResourceRouter on a FastAPI APIRouter:
middleware tokens resolve through a MiddlewareRegistry, and handler
references resolve to controller methods on first dispatch.
"""

import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from fastapi import APIRouter, Request
from fastapi.routing import APIRoute
from starlette.concurrency import run_in_threadpool

from fastapi_resource_routing.config import ConfigLookup
from fastapi_resource_routing.core.controllers import ControllerResolver
from fastapi_resource_routing.core.engine import GroupingEngine, RouteDefinition
from fastapi_resource_routing.core.middleware import MiddlewareRegistry, build_middleware_chain
from fastapi_resource_routing.core.registrar import SCOPE_MIDDLEWARE, ResourceRouter

logger = logging.getLogger(__name__)


class FastAPIEngine(GroupingEngine):
    """Routing engine registering routes on a FastAPI APIRouter.

    Args:
        router: Target APIRouter; a new one is created when omitted.
        middleware: Named middleware, ``async def mw(request, call_next, *params)``.
        resolver: Turns a handler reference into a callable. Called once
            per route, on its first request.

    Example:
        engine = FastAPIEngine(middleware={"auth": require_token})
        router = ResourceRouter(engine)
        router.resource("widgets", "app.controllers.WidgetController")
        app.include_router(engine.router)
    """

    def __init__(
        self,
        router: APIRouter | None = None,
        *,
        middleware: MiddlewareRegistry | Mapping[str, Callable[..., Any]] | None = None,
        resolver: Callable[[str], Callable[..., Any]] | None = None,
    ) -> None:
        super().__init__()
        self.router = router if router is not None else APIRouter()
        self.middleware = (
            middleware if isinstance(middleware, MiddlewareRegistry) else MiddlewareRegistry(middleware)
        )
        self._resolver = resolver if resolver is not None else ControllerResolver()

    def _register(self, definition: RouteDefinition) -> None:
        """Add one route to the APIRouter.

        Raises:
            MiddlewareResolutionError: If a middleware token is unknown.
        """
        middleware_stack = self.middleware.resolve_all(definition.middleware)

        kwargs: dict[str, Any] = {"tags": _derive_tags(definition.path)}
        if middleware_stack:
            kwargs["route_class_override"] = _make_middleware_route(middleware_stack)

        if isinstance(definition.handler, str):
            endpoint = self._lazy_endpoint(definition.handler)
            kwargs["name"] = definition.handler
            kwargs["response_model"] = None
        else:
            endpoint = definition.handler

        self.router.add_api_route(
            path=definition.path,
            endpoint=endpoint,
            methods=[definition.method],
            **kwargs,
        )

    def _lazy_endpoint(self, reference: str) -> Callable[..., Any]:
        """Build an endpoint resolving ``reference`` on its first request.

        The controller method is called as ``handler(request, **path_params)``.
        Sync methods run in the threadpool, as FastAPI runs sync endpoints.
        """
        resolver = self._resolver
        resolved: Callable[..., Any] | None = None

        async def endpoint(request: Request) -> Any:
            nonlocal resolved
            if resolved is None:
                resolved = resolver(reference)
            if not inspect.iscoroutinefunction(resolved):
                result = await run_in_threadpool(resolved, request, **request.path_params)
            else:
                result = await resolved(request, **request.path_params)
            if inspect.isawaitable(result):
                result = await result
            return result

        endpoint.__doc__ = f"Dispatches to {reference}."
        return endpoint


def scope_middleware(router: ResourceRouter) -> Callable[..., Any]:
    """Create the api-scope middleware for a ResourceRouter.

    Marks the resource named by the token parameter as the router's
    current scope and exposes it as ``request.state.api_scope``.
    """

    async def api_scope(request: Any, call_next: Any, scope: str) -> Any:
        router.set_current_scope(scope)
        request.state.api_scope = scope
        return await call_next(request)

    return api_scope


def create_resource_router(
    config: ConfigLookup | None = None,
    *,
    middleware: Mapping[str, Callable[..., Any]] | None = None,
    prefix: str = "",
    default_options: Mapping[str, Any] | None = None,
    resolver: Callable[[str], Callable[..., Any]] | None = None,
    **router_options: Any,
) -> ResourceRouter:
    """Create a ResourceRouter backed by a new FastAPI APIRouter.

    The api-scope middleware is registered automatically unless
    ``middleware`` provides one.

    Args:
        config: Configuration lookup for default options and namespaces.
        middleware: Named middleware (e.g. {"auth": require_token}).
        prefix: Optional URL prefix for all routes.
        default_options: Base options merged under every resource.
        resolver: Optional handler reference resolver.
        **router_options: Passed on to ResourceRouter (fallback_controller,
            auth_controller).

    Returns:
        The ResourceRouter; its APIRouter is ``router.engine.router``.

    Example:
        from fastapi import FastAPI
        from fastapi_resource_routing import create_resource_router

        api = create_resource_router(middleware={"auth": require_token})
        api.resource("widgets", "app.controllers.WidgetController")
        api.auth()

        app = FastAPI()
        app.include_router(api.engine.router)
    """
    engine = FastAPIEngine(APIRouter(prefix=prefix), middleware=middleware, resolver=resolver)
    router = ResourceRouter(engine, config, default_options=default_options, **router_options)

    if SCOPE_MIDDLEWARE not in engine.middleware:
        engine.middleware.register(SCOPE_MIDDLEWARE, scope_middleware(router))

    logger.info(
        "Created resource router",
        extra={
            "prefix": prefix or "(none)",
            "middleware": sorted((middleware or {}).keys()),
        },
    )
    return router


def _derive_tags(path: str) -> list[str]:
    """Derive OpenAPI tags from a URL path.

    Takes the first non-parameter segment from the path.

    Examples:
        /users/{id} -> ["users"]
        /auth/login -> ["auth"]
        /{id} -> ["root"]
        / -> ["root"]
    """
    parts = [p for p in path.split("/") if p and not p.startswith("{")]
    if parts:
        return [parts[0]]
    return ["root"]


def _make_middleware_route(
    middleware_stack: Sequence[Callable[..., Any]],
) -> type[APIRoute]:
    """Create a custom APIRoute subclass that wraps handlers with middleware.

    The wrapping happens in get_route_handler(), called AFTER FastAPI resolves
    dependency injection. Middleware receives (request, call_next) where
    call_next returns the route's Response.
    """

    class MiddlewareRoute(APIRoute):
        def get_route_handler(self) -> Callable[..., Any]:
            original_handler = super().get_route_handler()
            return build_middleware_chain(original_handler, middleware_stack)

    return MiddlewareRoute
