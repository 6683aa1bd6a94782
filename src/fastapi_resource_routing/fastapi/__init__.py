"""FastAPI adapter for resource routing."""

from fastapi_resource_routing.fastapi.engine import (
    FastAPIEngine,
    create_resource_router,
    scope_middleware,
)

__all__ = ["FastAPIEngine", "create_resource_router", "scope_middleware"]
