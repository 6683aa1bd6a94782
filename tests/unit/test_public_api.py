"""Tests for public API exports in __init__.py."""


def test_primary_api_export():
    """create_resource_router and ResourceRouter are exported from the root package."""
    from fastapi_resource_routing import ResourceRouter, create_resource_router

    assert callable(create_resource_router)
    assert isinstance(ResourceRouter, type)


def test_core_types_exported():
    from fastapi_resource_routing import (
        HTTP_VERB_TO_ACTION,
        REST_ACTIONS,
        ControllerResolver,
        GroupingEngine,
        MappingConfig,
        MiddlewareRegistry,
        ResourceOptions,
        RestAction,
        RouteDefinition,
        RouteTable,
        normalize_options,
    )

    assert list(REST_ACTIONS) == ["index", "create", "read", "update", "delete"]
    assert HTTP_VERB_TO_ACTION["destroy"] == "delete"
    assert issubclass(RouteTable, GroupingEngine)
    assert hasattr(ResourceOptions, "__dataclass_fields__")
    assert hasattr(RouteDefinition, "__dataclass_fields__")
    assert RestAction is not None
    assert ControllerResolver is not None
    assert MappingConfig is not None
    assert MiddlewareRegistry is not None
    assert callable(normalize_options)


def test_exceptions_exported():
    from fastapi_resource_routing import (
        ControllerResolutionError,
        MiddlewareResolutionError,
        ResourceOptionsError,
        ResourceRoutingError,
    )

    assert issubclass(ControllerResolutionError, ResourceRoutingError)
    assert issubclass(MiddlewareResolutionError, ResourceRoutingError)
    assert issubclass(ResourceOptionsError, ResourceRoutingError)


def test_fastapi_adapter_exports():
    from fastapi_resource_routing import GroupingEngine
    from fastapi_resource_routing.fastapi import (
        FastAPIEngine,
        create_resource_router,
        scope_middleware,
    )

    assert issubclass(FastAPIEngine, GroupingEngine)
    assert callable(create_resource_router)
    assert callable(scope_middleware)


def test_all_names_resolve():
    import fastapi_resource_routing

    for name in fastapi_resource_routing.__all__:
        assert hasattr(fastapi_resource_routing, name), name
