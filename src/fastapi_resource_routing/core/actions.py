"""REST action conventions.

Maps the five resource actions to their HTTP method and path fragment,
and the shorthand verb names to the action they register.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType

# Joins a controller reference to its action: "app.controllers.Widgets@read"
HANDLER_DELIMITER = "@"


@dataclass(frozen=True)
class RestAction:
    """A conventional resource action.

    Attributes:
        name: Action name (index, create, read, update, delete).
        method: Routing engine method used to register it (lowercase).
        path: Path fragment appended to the resource prefix.
    """

    name: str
    method: str
    path: str = ""


# Canonical order matters: routes are always emitted in this order
REST_ACTIONS: MappingProxyType[str, RestAction] = MappingProxyType(
    {
        "index": RestAction("index", "get"),
        "create": RestAction("create", "post"),
        "read": RestAction("read", "get", "/{id}"),
        "update": RestAction("update", "patch", "/{id}"),
        "delete": RestAction("delete", "delete", "/{id}"),
    }
)

# Shorthand verb names -> the single action they register
HTTP_VERB_TO_ACTION: MappingProxyType[str, str] = MappingProxyType(
    {
        "get": "read",
        "post": "create",
        "patch": "update",
        "destroy": "delete",
    }
)


def select_actions(only: Iterable[str] | None = None) -> tuple[RestAction, ...]:
    """Select the REST actions to emit.

    Intersects REST_ACTIONS with ``only`` while keeping the canonical
    order. Unknown names in ``only`` are dropped.

    Args:
        only: Allow-list of action names, or None for all actions.

    Returns:
        Tuple of RestAction in canonical order.

    Examples:
        select_actions() -> index, create, read, update, delete
        select_actions(["delete", "index"]) -> index, delete
        select_actions([]) -> ()
    """
    if only is None:
        return tuple(REST_ACTIONS.values())
    allowed = set(only)
    return tuple(action for name, action in REST_ACTIONS.items() if name in allowed)


def action_path(action: RestAction, route: str | None = None) -> str:
    """Return the effective path for an action.

    An explicit ``route`` overrides the conventional fragment, even when
    it is the empty string.
    """
    if route is not None:
        return route
    return action.path or ""


def handler_reference(controller: str, action: str) -> str:
    """Join a controller reference and an action name."""
    return f"{controller}{HANDLER_DELIMITER}{action}"


def split_handler_reference(reference: str) -> tuple[str, str]:
    """Split "Controller@action" into its controller and action parts.

    A reference without a delimiter names the controller itself, which
    must then be callable; the action part is empty.
    """
    controller, _, action = reference.rpartition(HANDLER_DELIMITER)
    if not controller:
        return action, ""
    return controller, action
