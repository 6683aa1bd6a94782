"""Named middleware registry and middleware chain assembly.

Route groups carry middleware as string tokens ("auth", "api-scope:users").
MiddlewareRegistry maps token names to async callables and binds token
parameters. Zero framework dependencies; works with any middleware of
the form ``async def mw(request, call_next, *params)``.
"""

import inspect
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from fastapi_resource_routing.core.engine import parse_middleware
from fastapi_resource_routing.exceptions import MiddlewareResolutionError


class MiddlewareRegistry:
    """Resolves middleware tokens to async callables.

    Example:
        async def auth(request, call_next):
            if "authorization" not in request.headers:
                return JSONResponse({"detail": "Unauthorized"}, status_code=401)
            return await call_next(request)

        registry = MiddlewareRegistry({"auth": auth})
        registry.resolve("auth")  # -> auth
    """

    def __init__(self, middleware: Mapping[str, Callable[..., Any]] | None = None) -> None:
        self._middleware: dict[str, Callable[..., Any]] = {}
        for name, mw in (middleware or {}).items():
            self.register(name, mw)

    def register(self, name: str, middleware: Callable[..., Any]) -> None:
        """Register ``middleware`` under ``name``, replacing any previous entry.

        Raises:
            MiddlewareResolutionError: If middleware is not an async callable.
        """
        if not callable(middleware):
            raise MiddlewareResolutionError(
                f"Middleware {name!r} must be callable, got {type(middleware).__name__}"
            )
        if not inspect.iscoroutinefunction(middleware):
            raise MiddlewareResolutionError(
                f"Middleware {name!r} must be async, "
                f"got sync function {getattr(middleware, '__name__', middleware)!r}"
            )
        self._middleware[name] = middleware

    def __contains__(self, name: object) -> bool:
        return name in self._middleware

    def resolve(self, token: str) -> Callable[..., Any]:
        """Resolve a middleware token to a ``(request, call_next)`` callable.

        Raises:
            MiddlewareResolutionError: If the token names no registered middleware.
        """
        name, params = parse_middleware(token)
        try:
            middleware = self._middleware[name]
        except KeyError:
            raise MiddlewareResolutionError(
                f"Unknown middleware {name!r} in token {token!r}. "
                f"Registered: {sorted(self._middleware)}"
            ) from None
        return bind_parameters(middleware, params)

    def resolve_all(self, tokens: Sequence[str]) -> tuple[Callable[..., Any], ...]:
        return tuple(self.resolve(token) for token in tokens)


def bind_parameters(
    middleware: Callable[..., Any],
    params: Sequence[str],
) -> Callable[..., Any]:
    """Bind token parameters as trailing arguments of a middleware.

    Returns the middleware unchanged when there are no parameters.
    """
    if not params:
        return middleware

    bound_params = tuple(params)

    async def bound(request: Any, call_next: Any) -> Any:
        return await middleware(request, call_next, *bound_params)

    bound.__name__ = f"{middleware.__name__}:{','.join(bound_params)}"
    bound.__qualname__ = bound.__name__
    return bound


def build_middleware_chain(
    handler: Callable[..., Any],
    middleware_stack: Sequence[Callable[..., Any]],
) -> Callable[..., Any]:
    """Wrap a handler function with a middleware chain.

    Composes middleware in order so that the first middleware in the list
    is the outermost (executes first). Each middleware receives (request, call_next)
    where call_next invokes the next middleware or handler.

    Args:
        handler: The route handler function.
        middleware_stack: Ordered sequence of middleware (outermost first).

    Returns:
        A wrapped handler function that executes the middleware chain.
        If middleware_stack is empty, returns the handler unchanged.
    """
    if not middleware_stack:
        return handler

    chain = handler
    for mw in reversed(middleware_stack):
        chain = _wrap_with_middleware(chain, mw)
    return chain


def _wrap_with_middleware(
    next_handler: Callable[..., Any],
    middleware: Callable[..., Any],
) -> Callable[..., Any]:
    async def wrapped(request: Any) -> Any:
        async def call_next(req: Any) -> Any:
            return await next_handler(req)

        return await middleware(request, call_next)

    wrapped.__name__ = (
        f"{middleware.__name__}_wrapping_{getattr(next_handler, '__name__', 'handler')}"
    )
    wrapped.__qualname__ = wrapped.__name__

    return wrapped
