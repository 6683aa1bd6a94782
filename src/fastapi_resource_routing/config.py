"""Configuration lookup for resource routing.

The router never loads configuration itself. Applications inject a
lookup object exposing ``get(key)``; MappingConfig adapts a plain
nested mapping to that interface.
"""

from collections.abc import Mapping
from typing import Any, Protocol

# Configuration keys read by the router
DEFAULT_OPTIONS_KEY = "api.defaultOptions"
NAMESPACE_KEY_PREFIX = "api.namespace"


class ConfigLookup(Protocol):
    """Key-value configuration source.

    Returns None when the key is absent.
    """

    def get(self, key: str) -> Any | None: ...


class MappingConfig:
    """Dotted-key lookup into a nested mapping.

    Example:
        config = MappingConfig({"api": {"namespace": {"controller": "app.controllers"}}})
        config.get("api.namespace.controller")  # -> "app.controllers"
        config.get("api.namespace.model")  # -> None
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: Mapping[str, Any] = values or {}

    def get(self, key: str) -> Any | None:
        """Look up a dotted key, returning None when any part is missing."""
        # Flat keys take precedence so "api.defaultOptions" may be stored as-is
        if key in self._values:
            return self._values[key]

        current: Any = self._values
        for part in key.split("."):
            if not isinstance(current, Mapping) or part not in current:
                return None
            current = current[part]
        return current

    def __repr__(self) -> str:
        return f"MappingConfig({dict(self._values)!r})"


def namespace_key(category: str) -> str:
    """Return the configuration key holding a category's namespace."""
    return f"{NAMESPACE_KEY_PREFIX}.{category}"
