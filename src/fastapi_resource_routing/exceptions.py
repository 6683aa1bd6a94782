"""Exception hierarchy for resource routing errors."""


class ResourceRoutingError(Exception):
    """Base exception for all resource routing errors.

    This is the parent class for all exceptions raised by the
    fastapi-resource-routing package. Catching this exception
    will catch all routing-related errors.

    Example:
        try:
            router.resource("widgets", 42)
        except ResourceRoutingError as e:
            logger.error(f"Failed to register routes: {e}")
    """


class ResourceOptionsError(ResourceRoutingError):
    """Raised when resource options have an unsupported shape.

    Options must be either a bare controller reference (str) or a
    mapping of option names to values. Anything else fails fast at
    registration time rather than producing a broken route.

    Example:
        ResourceOptionsError(
            "Options for resource 'widgets' must be a controller reference "
            "or a mapping, got int"
        )
    """


class MiddlewareResolutionError(ResourceRoutingError):
    """Raised when a middleware token names no registered middleware.

    This exception is raised by the FastAPI engine when a route or group
    declares a middleware token (e.g. "auth" or "api-scope:users") whose
    name is missing from the middleware registry.

    Example:
        MiddlewareResolutionError(
            "Unknown middleware 'auth' on GET /users. Registered: ['api-scope']"
        )
    """


class ControllerResolutionError(ResourceRoutingError):
    """Raised when a handler reference cannot be resolved to a callable.

    Handler references have the form "package.module.Controller@action".
    Resolution happens when the route is first dispatched, so this error
    surfaces on the first request that hits the route.

    Example:
        ControllerResolutionError(
            "Cannot import controller 'app.controllers.WidgetController' "
            "for handler 'app.controllers.WidgetController@read'"
        )
    """
