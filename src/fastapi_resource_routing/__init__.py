"""Convention-driven REST resource routing for FastAPI."""

# Primary API: the main entry points
from fastapi_resource_routing.config import ConfigLookup, MappingConfig

# Core types: for advanced users and custom engines
from fastapi_resource_routing.core.actions import (
    HTTP_VERB_TO_ACTION,
    REST_ACTIONS,
    RestAction,
)
from fastapi_resource_routing.core.controllers import ControllerResolver
from fastapi_resource_routing.core.engine import (
    GroupingEngine,
    RouteDefinition,
    RouteTable,
    RoutingEngine,
)
from fastapi_resource_routing.core.middleware import MiddlewareRegistry
from fastapi_resource_routing.core.options import ResourceOptions, normalize_options
from fastapi_resource_routing.core.registrar import ResourceRouter

# Exceptions: for error handling
from fastapi_resource_routing.exceptions import (
    ControllerResolutionError,
    MiddlewareResolutionError,
    ResourceOptionsError,
    ResourceRoutingError,
)
from fastapi_resource_routing.fastapi.engine import FastAPIEngine, create_resource_router

__all__ = [
    # Primary API
    "create_resource_router",
    "ResourceRouter",
    "FastAPIEngine",
    "MappingConfig",
    "ConfigLookup",
    # Core types
    "ControllerResolver",
    "GroupingEngine",
    "HTTP_VERB_TO_ACTION",
    "MiddlewareRegistry",
    "REST_ACTIONS",
    "ResourceOptions",
    "RestAction",
    "RouteDefinition",
    "RouteTable",
    "RoutingEngine",
    "normalize_options",
    # Exceptions
    "ControllerResolutionError",
    "MiddlewareResolutionError",
    "ResourceOptionsError",
    "ResourceRoutingError",
]

__version__ = "1.0.0"
