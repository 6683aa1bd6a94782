"""Convention-driven resource registration.

ResourceRouter derives the REST routes of a resource from its name and a
small options value, wraps them in a route group (prefix + middleware +
namespace) and registers them on a routing engine.

Shorthand forms funnel into resource():

    router.read("widgets", "WidgetController")   # GET /widgets/{id}
    router.get("health", "HealthController")     # GET /health
    router.auth()                                # /auth/login, /auth/user, ...

Any other attribute is forwarded unchanged to the routing engine.
"""

import logging
from collections.abc import Callable, Mapping
from contextvars import ContextVar
from functools import partial
from itertools import count
from types import MappingProxyType
from typing import Any

from fastapi_resource_routing.config import DEFAULT_OPTIONS_KEY, ConfigLookup
from fastapi_resource_routing.core.actions import (
    HTTP_VERB_TO_ACTION,
    REST_ACTIONS,
    action_path,
    handler_reference,
    select_actions,
)
from fastapi_resource_routing.core.engine import MIDDLEWARE_PARAMETER_SEPARATOR, RoutingEngine
from fastapi_resource_routing.core.options import (
    RawOptions,
    ResourceOptions,
    normalize_options,
)
from fastapi_resource_routing.exceptions import ResourceOptionsError

logger = logging.getLogger(__name__)

# Middleware token guarding authenticated routes
AUTH_MIDDLEWARE = "auth"

# Middleware name tagging the active resource scope: "api-scope:<name>"
SCOPE_MIDDLEWARE = "api-scope"

# Controllers used when the caller names none
DEFAULT_CONTROLLER = "app.controllers.RestController"
DEFAULT_AUTH_CONTROLLER = "app.controllers.AuthController"

# Resource name and default basename of the auth endpoints
AUTH_RESOURCE = "auth"
AUTH_BASENAME = "User"

# Called inside the resource group with the engine and resolved options
CustomRoutes = Callable[[Any, ResourceOptions], Any]

_router_ids = count()


class ResourceRouter:
    """Registers REST resources on a routing engine.

    Args:
        engine: Routing engine providing group() and verb methods.
        config: Configuration lookup for default options
            (api.defaultOptions) and namespaces (api.namespace.<category>).
        default_options: Base options merged under every resource's
            options. Overrides api.defaultOptions when given.
        fallback_controller: Controller used when a resource names none.
        auth_controller: Controller used by auth() when the caller names none.

    Example:
        table = RouteTable()
        router = ResourceRouter(table, MappingConfig({"api": {"namespace": {
            "controller": "app.controllers",
        }}}))
        router.resource("widgets", {"controller": "WidgetController", "only": ["index", "read"]})
        # GET /widgets -> app.controllers.WidgetController@index
        # GET /widgets/{id} -> app.controllers.WidgetController@read
    """

    def __init__(
        self,
        engine: RoutingEngine,
        config: ConfigLookup | None = None,
        *,
        default_options: Mapping[str, Any] | None = None,
        fallback_controller: str = DEFAULT_CONTROLLER,
        auth_controller: str = DEFAULT_AUTH_CONTROLLER,
    ) -> None:
        self._engine = engine
        self._config = config
        self._fallback_controller = fallback_controller
        self._auth_controller = auth_controller
        self._resources: dict[str, ResourceOptions] = {}
        self._default_options: Mapping[str, Any] = MappingProxyType({})
        self._current_scope: ContextVar[str | None] = ContextVar(
            f"resource_router_scope_{next(_router_ids)}", default=None
        )

        if default_options is None and config is not None:
            default_options = config.get(DEFAULT_OPTIONS_KEY)
        if default_options:
            self.set_default_options(default_options)

    @property
    def engine(self) -> RoutingEngine:
        return self._engine

    @property
    def resources(self) -> Mapping[str, ResourceOptions]:
        """Read-only view of resolved options by resource name."""
        return MappingProxyType(self._resources)

    @property
    def default_options(self) -> Mapping[str, Any]:
        return self._default_options

    def set_default_options(self, options: Mapping[str, Any]) -> None:
        self._default_options = MappingProxyType(dict(options))

    def set_current_scope(self, name: str | None) -> None:
        """Mark ``name`` as the active resource scope.

        The scope is held in a ContextVar, so concurrent requests each
        see the scope set by their own api-scope middleware.
        """
        self._current_scope.set(name)

    @property
    def current_scope(self) -> str | None:
        return self._current_scope.get()

    def get_current_resource_options(self) -> ResourceOptions | None:
        """Return the options of the active scope, or None when unset or unknown."""
        scope = self._current_scope.get()
        if scope is None:
            return None
        return self._resources.get(scope)

    def resource(
        self,
        name: str,
        options: RawOptions | None = None,
        custom: CustomRoutes | None = None,
    ) -> ResourceOptions:
        """Register the REST routes of a resource.

        Args:
            name: Resource name, used as the path prefix and scope.
            options: Controller reference or options mapping.
            custom: Optional callback registering extra routes inside the
                resource group before the REST routes. Receives the
                engine and the resolved options.

        Returns:
            The resolved options stored for ``name``.

        Raises:
            ResourceOptionsError: If ``options`` has an unsupported shape, or
                ``name`` contains a middleware parameter separator.
        """
        if MIDDLEWARE_PARAMETER_SEPARATOR in name:
            raise ResourceOptionsError(
                f"Resource name {name!r} must not contain "
                f"{MIDDLEWARE_PARAMETER_SEPARATOR!r}; it would split the {SCOPE_MIDDLEWARE} token"
            )

        resolved = normalize_options(
            {} if options is None else options,
            self._default_options,
            self._config,
            fallback_controller=self._fallback_controller,
            name=name,
        )

        if name in self._resources:
            logger.debug("Replacing registered resource options", extra={"resource": name})
        self._resources[name] = resolved

        middleware: list[str] = []
        if resolved.auth:
            middleware.append(AUTH_MIDDLEWARE)
        middleware.append(f"{SCOPE_MIDDLEWARE}:{name}")

        actions = select_actions(resolved.only)

        def register_routes(engine: Any) -> None:
            if custom is not None:
                custom(engine, resolved)

            for action in actions:
                register = getattr(engine, action.method)
                register(
                    action_path(action, resolved.route),
                    {"uses": handler_reference(resolved.controller, action.name)},
                )

        self._engine.group(
            {
                "middleware": middleware,
                "prefix": name,
                "namespace": resolved.namespace or "",
            },
            register_routes,
        )

        logger.info(
            "Registered resource",
            extra={
                "resource": name,
                "controller": resolved.controller,
                "actions": [action.name for action in actions],
                "custom": custom is not None,
            },
        )
        return resolved

    def auth(self, options: Mapping[str, Any] | None = None) -> ResourceOptions:
        """Register the authentication endpoints under /auth.

        Registers POST login, GET user (behind the auth middleware),
        GET logout and GET refresh, plus the deprecated PATCH refresh and
        DELETE logout. No REST routes are emitted and the group itself
        does not require authentication.
        """
        options = dict(options or {})
        if not options.get("controller"):
            options["controller"] = self._auth_controller
            options["namespace"] = ""
        if not options.get("basename"):
            options["basename"] = AUTH_BASENAME
        options["auth"] = False
        options["only"] = []

        return self.resource(AUTH_RESOURCE, options, _register_auth_routes)

    def group(self, attributes: Mapping[str, Any], callback: Callable[["ResourceRouter"], Any]) -> None:
        """Open an engine group; ``callback`` receives this router, not the engine."""
        self._engine.group(attributes, lambda _engine: callback(self))

    def dispatch(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        """Run a shorthand operation, or forward it to the engine.

        REST action names (index, create, read, update, delete) register
        a single-action resource from ``(name, options)``. Verb aliases
        (get, post, patch, destroy) register one route exactly at
        ``url`` from ``(url, controller)``. Anything else is called on the
        engine with the arguments unchanged.
        """
        rule = _SHORTHAND_RULES.get(operation)
        if rule is None:
            return getattr(self._engine, operation)(*args, **kwargs)
        return rule(self, operation, *args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not defined on the class
        if name.startswith("_"):
            raise AttributeError(name)
        if name in _SHORTHAND_RULES:
            return partial(self.dispatch, name)
        return getattr(self._engine, name)


def _action_shorthand(
    router: ResourceRouter,
    action: str,
    name: str,
    options: RawOptions | None = None,
) -> None:
    """Register a resource limited to one REST action."""
    if isinstance(options, str):
        options = {"controller": options}
    if isinstance(options, Mapping) or options is None:
        options = {**(options or {}), "only": [action]}
    router.resource(name, options)


def _verb_shorthand(
    router: ResourceRouter,
    verb: str,
    url: str,
    controller: str | None = None,
) -> None:
    """Register one route at ``url`` for the action a verb alias maps to."""
    router.resource(
        url,
        {
            "only": [HTTP_VERB_TO_ACTION[verb]],
            "controller": controller,
            "route": "",
        },
    )


# Operation name -> rewrite rule; action names win over verb aliases
_SHORTHAND_RULES: dict[str, Callable[..., None]] = {
    **{verb: _verb_shorthand for verb in HTTP_VERB_TO_ACTION},
    **{action: _action_shorthand for action in REST_ACTIONS},
}


def _register_auth_routes(engine: Any, options: ResourceOptions) -> None:
    controller = options.controller
    engine.post("login", {"uses": handler_reference(controller, "login")})
    engine.get(
        "user",
        {"uses": handler_reference(controller, "user"), "middleware": AUTH_MIDDLEWARE},
    )
    engine.get("logout", {"uses": handler_reference(controller, "logout")})
    engine.get("refresh", {"uses": handler_reference(controller, "refresh")})

    # Deprecated aliases kept for older clients; GET and POST are canonical
    engine.patch("refresh", {"uses": handler_reference(controller, "refresh")})
    engine.delete("logout", {"uses": handler_reference(controller, "logout")})
