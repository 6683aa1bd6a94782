"""Basic example demonstrating fastapi-resource-routing.

Registers a users resource, a single-route status endpoint and the auth
endpoints, all dispatching to controllers in app/controllers.py.

Run with:
    uvicorn main:app --reload

Available endpoints:
    GET    /users          - List all users
    POST   /users          - Create a new user
    GET    /users/{id}     - Get user by ID
    PATCH  /users/{id}     - Update user
    DELETE /users/{id}     - Delete user
    GET    /status         - Health check
    POST   /auth/login     - Log in
    GET    /auth/user      - Current user (requires token)
    GET    /auth/logout    - Log out
    GET    /auth/refresh   - Refresh token
"""

from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi_resource_routing import MappingConfig, create_resource_router

config = MappingConfig(
    {
        "api": {
            "defaultOptions": {"auth": True},
            "namespace": {"controller": "app.controllers", "model": "app.models"},
        }
    }
)


async def require_token(request: Any, call_next: Any) -> Any:
    if request.headers.get("authorization") != "Bearer demo":
        return JSONResponse({"detail": "Unauthorized"}, status_code=401)
    return await call_next(request)


api = create_resource_router(
    config,
    middleware={"auth": require_token},
    auth_controller="app.controllers.AuthController",
)
api.resource("users", {"controller": "UserController", "basename": "User"})
api.get("status", "StatusController")
api.auth()

app = FastAPI(title="Basic Example")
app.include_router(api.engine.router)
