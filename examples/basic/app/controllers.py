"""Controllers for the basic example."""

USERS: dict[str, dict[str, str]] = {"1": {"id": "1", "name": "Ada"}}


class UserController:
    def index(self, request):
        return list(USERS.values())

    async def create(self, request):
        data = await request.json()
        user_id = str(len(USERS) + 1)
        USERS[user_id] = {"id": user_id, **data}
        return USERS[user_id]

    def read(self, request, id):
        return USERS.get(id, {})

    async def update(self, request, id):
        USERS.setdefault(id, {"id": id}).update(await request.json())
        return USERS[id]

    def delete(self, request, id):
        return USERS.pop(id, {})


class StatusController:
    def read(self, request):
        return {"status": "ok"}


class AuthController:
    def login(self, request):
        return {"token": "demo"}

    def user(self, request):
        return USERS["1"]

    def logout(self, request):
        return {"logged_out": True}

    def refresh(self, request):
        return {"token": "demo"}
