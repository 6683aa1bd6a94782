"""Resource option normalization.

Turns the loose options accepted by ResourceRouter.resource() (a bare
controller reference or a partial mapping) into a resolved, immutable
ResourceOptions record. No further defaulting happens downstream.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Union

from fastapi_resource_routing.config import ConfigLookup, namespace_key
from fastapi_resource_routing.core.actions import REST_ACTIONS
from fastapi_resource_routing.exceptions import ResourceOptionsError

logger = logging.getLogger(__name__)

# Separates a namespace from the identifier it qualifies
NAMESPACE_DELIMITER = "."

# Fields that resolve against their own namespace category
NAMESPACED_TARGETS: tuple[str, ...] = ("model", "resource")

# A bare controller reference, or a partial mapping of option names to values
RawOptions = Union[str, Mapping[str, Any]]


@dataclass(frozen=True)
class ResourceOptions:
    """Resolved options for one resource.

    Attributes:
        controller: Controller reference; never empty once resolved.
        namespace: Namespace applied to the controller by the routing engine.
        basename: Identifier used to derive model and resource.
        model: Namespace-qualified model reference.
        resource: Namespace-qualified resource reference.
        auth: Whether the authentication middleware guards the resource.
        only: Allow-list of REST actions, or None for all of them.
        route: Explicit path fragment overriding every action's path.
        extra: Application-specific options the record does not model.
    """

    controller: str
    namespace: str | None = None
    basename: str | None = None
    model: str | None = None
    resource: str | None = None
    auth: bool = True
    only: tuple[str, ...] | None = None
    route: str | None = None
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def get(self, key: str, default: Any = None) -> Any:
        """Read an option by name, falling back to application-specific extras."""
        if key in _FIELD_NAMES and key != "extra":
            return getattr(self, key)
        return self.extra.get(key, default)


_FIELD_NAMES = frozenset(f.name for f in fields(ResourceOptions))


def resolve_namespace(
    config: ConfigLookup | None,
    category: str,
    identifier: str = "",
) -> str:
    """Qualify an identifier with its category namespace.

    Args:
        config: Configuration lookup holding api.namespace.<category>.
        category: Namespace category (controller, model, resource).
        identifier: Identifier to qualify; when empty the bare
            namespace is returned.

    Returns:
        The qualified identifier, or the namespace itself.

    Examples:
        namespace "app.models", "User" -> "app.models.User"
        namespace "", "User" -> "User"
        namespace "app.controllers", "" -> "app.controllers"
    """
    namespace = (config.get(namespace_key(category)) if config is not None else None) or ""
    if not identifier:
        return namespace
    if namespace:
        return f"{namespace}{NAMESPACE_DELIMITER}{identifier}"
    return identifier


def normalize_options(
    raw: RawOptions,
    defaults: Mapping[str, Any] | None = None,
    config: ConfigLookup | None = None,
    *,
    fallback_controller: str,
    name: str = "",
) -> ResourceOptions:
    """Resolve raw resource options into a ResourceOptions record.

    Merge order: ``defaults`` first, then ``raw`` (caller values win).

    Args:
        raw: Bare controller reference or partial options mapping.
        defaults: Base options merged under ``raw``.
        config: Namespace lookup for the controller, model and resource
            categories.
        fallback_controller: Controller used when none is given. It is
            used verbatim, without namespace resolution.
        name: Resource name, for log and error messages.

    Returns:
        Fully resolved ResourceOptions.

    Raises:
        ResourceOptionsError: If ``raw`` is neither a str nor a mapping,
            or ``only`` is not a str or iterable of str.
    """
    if isinstance(raw, str):
        raw = {"controller": raw}
    elif not isinstance(raw, Mapping):
        raise ResourceOptionsError(
            f"Options for resource {name!r} must be a controller reference "
            f"or a mapping, got {type(raw).__name__}"
        )

    merged: dict[str, Any] = {**(defaults or {}), **raw}

    auth = merged.get("auth")
    merged["auth"] = True if auth is None else bool(auth)

    if not merged.get("controller"):
        merged["controller"] = fallback_controller
    elif merged.get("namespace") is None:
        merged["namespace"] = resolve_namespace(config, "controller")

    basename = merged.get("basename")
    for target in NAMESPACED_TARGETS:
        identifier = merged.get(target)
        if identifier is None:
            identifier = basename
        if identifier:
            merged[target] = resolve_namespace(config, target, identifier)

    merged["only"] = _normalize_only(merged.get("only"), name)

    known = {key: merged.pop(key) for key in list(merged) if key in _FIELD_NAMES}
    known.pop("extra", None)
    return ResourceOptions(**known, extra=MappingProxyType(merged))


def _normalize_only(only: Any, name: str) -> tuple[str, ...] | None:
    """Coerce ``only`` to a tuple of known action names.

    Unknown action names are dropped with a warning; they never
    raise.
    """
    if only is None:
        return None
    if isinstance(only, str):
        only = (only,)
    elif not isinstance(only, Iterable):
        raise ResourceOptionsError(
            f"'only' for resource {name!r} must be an action name or a list of "
            f"action names, got {type(only).__name__}"
        )

    requested = tuple(only)
    invalid = [action for action in requested if not isinstance(action, str)]
    if invalid:
        raise ResourceOptionsError(
            f"'only' for resource {name!r} must contain action names, "
            f"got {type(invalid[0]).__name__}"
        )

    unknown = [action for action in requested if action not in REST_ACTIONS]
    if unknown:
        logger.warning(
            "Ignoring unknown actions in 'only'",
            extra={"resource": name, "unknown": unknown},
        )
    return tuple(action for action in requested if action in REST_ACTIONS)
