"""Shared pytest fixtures for fastapi-resource-routing tests."""

import importlib
import uuid
from pathlib import Path
from typing import Any

import pytest

from fastapi_resource_routing.config import MappingConfig
from fastapi_resource_routing.core.engine import RouteTable
from fastapi_resource_routing.core.registrar import ResourceRouter


@pytest.fixture
def anyio_backend() -> str:
    """Run anyio-marked tests on asyncio only; the tests use asyncio APIs directly."""
    return "asyncio"


@pytest.fixture
def route_table() -> RouteTable:
    """Return an empty in-memory route table."""
    return RouteTable()


@pytest.fixture
def namespace_config() -> MappingConfig:
    """Return a configuration with a namespace for every category."""
    return MappingConfig(
        {
            "api": {
                "namespace": {
                    "controller": "app.controllers",
                    "model": "app.models",
                    "resource": "app.resources",
                }
            }
        }
    )


@pytest.fixture
def router(route_table: RouteTable) -> ResourceRouter:
    """Return a ResourceRouter without configuration, recording into route_table."""
    return ResourceRouter(route_table)


@pytest.fixture
def routes_of():
    """Return a helper listing (method, path, handler) tuples of a route table."""

    def _routes(table: RouteTable) -> list[tuple[str, str, Any]]:
        return [(r.method, r.path, r.handler) for r in table]

    return _routes


@pytest.fixture
def create_controller_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Write an importable controllers module and return its dotted package name.

    Each call uses a unique package name so module caching never leaks
    between tests. Returns a callable that accepts the module source and
    returns the package name (e.g. "pkg_1a2b3c"); the module itself is
    importable as "<package>.controllers".
    """
    monkeypatch.syspath_prepend(str(tmp_path))

    def _create(content: str, module: str = "controllers") -> str:
        package = f"pkg_{uuid.uuid4().hex[:12]}"
        package_dir = tmp_path / package
        package_dir.mkdir()
        (package_dir / "__init__.py").write_text("")
        (package_dir / f"{module}.py").write_text(content)
        importlib.invalidate_caches()
        return package

    return _create


@pytest.fixture
def widget_controller_source() -> str:
    """Return a controller module with a sync and an async controller."""
    return """
class WidgetController:
    def index(self, request):
        return {"action": "index"}

    async def create(self, request):
        body = await request.json()
        return {"action": "create", "body": body}

    def read(self, request, id):
        return {"action": "read", "id": id}

    def update(self, request, id):
        return {"action": "update", "id": id}

    def delete(self, request, id):
        return {"action": "delete", "id": id}


class AuthController:
    def login(self, request):
        return {"action": "login"}

    def user(self, request):
        return {"action": "user"}

    def logout(self, request):
        return {"action": "logout"}

    def refresh(self, request):
        return {"action": "refresh"}


def health(request):
    return {"status": "ok"}
"""
