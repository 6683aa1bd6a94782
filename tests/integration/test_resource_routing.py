"""End-to-end tests: resources registered through ResourceRouter served by FastAPI."""

from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from fastapi_resource_routing import MappingConfig, ResourceRouter, create_resource_router

CONTROLLER_SOURCE = """
class WidgetController:
    def index(self, request):
        return {"action": "index", "scope": request.state.api_scope}

    async def create(self, request):
        return {"action": "create", "body": await request.json()}

    def read(self, request, id):
        return {"action": "read", "id": id}

    def update(self, request, id):
        return {"action": "update", "id": id}

    def delete(self, request, id):
        return {"action": "delete", "id": id}

    def export(self, request):
        return {"action": "export"}


class AuthController:
    def login(self, request):
        return {"action": "login"}

    def user(self, request):
        return {"action": "user"}

    def logout(self, request):
        return {"action": "logout"}

    def refresh(self, request):
        return {"action": "refresh"}


class StatusController:
    def read(self, request):
        return {"status": "ok"}
"""


async def require_token(request: Any, call_next: Any) -> Any:
    if request.headers.get("authorization") != "Bearer secret":
        return JSONResponse({"detail": "Unauthorized"}, status_code=401)
    return await call_next(request)


AUTH_HEADERS = {"authorization": "Bearer secret"}


@pytest.fixture
def package(create_controller_module) -> str:
    return create_controller_module(CONTROLLER_SOURCE)


@pytest.fixture
def api(package) -> ResourceRouter:
    config = MappingConfig({"api": {"namespace": {"controller": f"{package}.controllers"}}})
    return create_resource_router(config, middleware={"auth": require_token})


def serve(api: ResourceRouter) -> TestClient:
    app = FastAPI()
    app.include_router(api.engine.router)
    return TestClient(app)


class TestRestResource:
    """Test the five conventional routes end to end."""

    def test_all_actions_dispatch_to_controller(self, api):
        api.resource("widgets", "WidgetController")
        client = serve(api)

        assert client.get("/widgets", headers=AUTH_HEADERS).json() == {
            "action": "index",
            "scope": "widgets",
        }
        assert client.post("/widgets", json={"name": "w"}, headers=AUTH_HEADERS).json() == {
            "action": "create",
            "body": {"name": "w"},
        }
        assert client.get("/widgets/5", headers=AUTH_HEADERS).json() == {"action": "read", "id": "5"}
        assert client.patch("/widgets/5", headers=AUTH_HEADERS).json() == {
            "action": "update",
            "id": "5",
        }
        assert client.delete("/widgets/5", headers=AUTH_HEADERS).json() == {
            "action": "delete",
            "id": "5",
        }

    def test_auth_middleware_guards_resource(self, api):
        api.resource("widgets", "WidgetController")
        client = serve(api)

        response = client.get("/widgets")
        assert response.status_code == 401

    def test_public_resource(self, api):
        api.resource("widgets", {"controller": "WidgetController", "auth": False, "only": ["read"]})
        client = serve(api)

        assert client.get("/widgets/1").status_code == 200
        assert client.get("/widgets").status_code == 404

    def test_custom_routes(self, api):
        def custom(engine, options):
            engine.get("export", {"uses": f"{options.controller}@export"})

        api.resource("widgets", {"controller": "WidgetController", "only": []}, custom)
        client = serve(api)

        assert client.get("/widgets/export", headers=AUTH_HEADERS).json() == {"action": "export"}


class TestShorthands:
    """Test shorthand registrations end to end."""

    def test_get_shorthand_registers_exact_url(self, api):
        api.get("status", "StatusController")
        client = serve(api)

        assert client.get("/status", headers=AUTH_HEADERS).json() == {"status": "ok"}
        assert client.get("/status/1", headers=AUTH_HEADERS).status_code == 404


class TestAuthEndpoints:
    """Test auth() endpoints end to end."""

    def test_auth_routes(self, package):
        api = create_resource_router(
            middleware={"auth": require_token},
            auth_controller=f"{package}.controllers.AuthController",
        )
        api.auth()
        client = serve(api)

        assert client.post("/auth/login").json() == {"action": "login"}
        assert client.get("/auth/logout").json() == {"action": "logout"}
        assert client.get("/auth/refresh").json() == {"action": "refresh"}
        assert client.patch("/auth/refresh").json() == {"action": "refresh"}
        assert client.delete("/auth/logout").json() == {"action": "logout"}

    def test_user_requires_authentication(self, package):
        api = create_resource_router(
            middleware={"auth": require_token},
            auth_controller=f"{package}.controllers.AuthController",
        )
        api.auth()
        client = serve(api)

        assert client.get("/auth/user").status_code == 401
        assert client.get("/auth/user", headers=AUTH_HEADERS).json() == {"action": "user"}


class TestScope:
    """Test current resource options introspection during a request."""

    def test_current_resource_options_visible_to_route_middleware(self, api):
        seen: list[Any] = []

        async def inspect_scope(request: Any, call_next: Any) -> Any:
            seen.append(api.get_current_resource_options())
            return await call_next(request)

        api.engine.middleware.register("inspect", inspect_scope)

        def custom(engine, options):
            engine.get("export", {"uses": f"{options.controller}@export", "middleware": "inspect"})

        api.resource("widgets", {"controller": "WidgetController", "only": [], "basename": "Widget"}, custom)
        client = serve(api)

        client.get("/widgets/export", headers=AUTH_HEADERS)

        assert seen == [api.resources["widgets"]]
        assert seen[0].model == "Widget"
