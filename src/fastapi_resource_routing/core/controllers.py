"""Handler reference resolution.

Turns "package.module.Controller@action" into a bound method of a
controller instance. Controllers are instantiated once per resolver.
"""

import importlib
import logging
from collections.abc import Callable
from typing import Any

from fastapi_resource_routing.core.actions import split_handler_reference
from fastapi_resource_routing.core.options import NAMESPACE_DELIMITER
from fastapi_resource_routing.exceptions import ControllerResolutionError

logger = logging.getLogger(__name__)


def import_object(path: str) -> Any:
    """Import an object from a dotted path such as "app.controllers.Users".

    Raises:
        ControllerResolutionError: If the path has no module part, the
            module can't be imported, or the attribute is missing.
    """
    module_name, _, attribute = path.rpartition(NAMESPACE_DELIMITER)
    if not module_name:
        raise ControllerResolutionError(
            f"Controller reference {path!r} is not a dotted path.\n"
            "  Hint: configure api.namespace.controller or pass a fully "
            "qualified controller such as 'app.controllers.Users'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ControllerResolutionError(
            f"Cannot import module {module_name!r} for controller {path!r}\n"
            f"Error: {type(exc).__name__}: {exc}"
        ) from exc

    try:
        return getattr(module, attribute)
    except AttributeError:
        raise ControllerResolutionError(
            f"Module {module_name!r} has no attribute {attribute!r}"
        ) from None


class ControllerResolver:
    """Resolves handler references, caching one instance per controller class.

    Example:
        resolver = ControllerResolver()
        handler = resolver("app.controllers.WidgetController@read")
        handler(request, id="42")
    """

    def __init__(self) -> None:
        self._instances: dict[str, Any] = {}

    def __call__(self, reference: str) -> Callable[..., Any]:
        """Resolve a handler reference to a callable.

        A reference without an action resolves to the named object
        itself, which must be callable.

        Raises:
            ControllerResolutionError: If the controller can't be imported
                or lacks a callable for the action.
        """
        controller_path, action = split_handler_reference(reference)

        if not action:
            target = import_object(controller_path)
            if not callable(target):
                raise ControllerResolutionError(f"Handler {reference!r} is not callable")
            return target

        controller = self._instance(controller_path)
        handler = getattr(controller, action, None)
        if handler is None or not callable(handler):
            raise ControllerResolutionError(
                f"Controller {controller_path!r} has no action {action!r} "
                f"for handler {reference!r}"
            )
        return handler

    def _instance(self, controller_path: str) -> Any:
        if controller_path not in self._instances:
            controller_class = import_object(controller_path)
            self._instances[controller_path] = (
                controller_class() if isinstance(controller_class, type) else controller_class
            )
            logger.debug("Instantiated controller", extra={"controller": controller_path})
        return self._instances[controller_path]
