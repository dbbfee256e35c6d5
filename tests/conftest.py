import re
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest
from fastapi import FastAPI, HTTPException, Request, Response
from pydantic import BaseModel, Field, field_validator

from user_console.app.application.operation_coordinator import OperationCoordinator
from user_console.app.application.state.record_store import RecordStore
from user_console.app.infrastructure.sdk_adapter.users_adapter import UsersAdapter
from user_console.clients.users_api_sdk.auth_store import MemoryTokenStore
from user_console.clients.users_api_sdk.config import SDKConfig
from user_console.clients.users_api_sdk.http_client import HttpClient

# stricter than the console's own check: the TLD needs two letters
SERVER_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[A-Za-z]{2,}$")


def _check_email(value: str | None) -> str | None:
    if value is not None and not SERVER_EMAIL_PATTERN.match(value):
        raise ValueError("value is not a valid email address")
    return value


class UserCreateBody(BaseModel):
    name: str = Field(min_length=3, max_length=50)
    email: str
    password: str = Field(min_length=8)

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        return _check_email(value)


class UserUpdateBody(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=50)
    email: str | None = None
    current_password: str | None = None
    new_password: str | None = Field(default=None, min_length=8)

    @field_validator("email")
    @classmethod
    def _email(cls, value: str | None) -> str | None:
        return _check_email(value)


class BulkDeleteBody(BaseModel):
    userIds: list[int]


class FakeUsersService:
    """In-process users service speaking the same JSON as the real one."""

    def __init__(self) -> None:
        self.users: dict[int, dict[str, Any]] = {}
        self.passwords: dict[int, str] = {}
        self.next_id = 1
        self.failing_ids: set[int] = set()
        self.include_timestamps = False
        self.requests: list[tuple[str, str]] = []
        self.authorization: list[str | None] = []
        self.app = build_users_app(self)

    def seed(self, name: str, email: str, password: str = "password123") -> dict[str, Any]:
        user_id = self.next_id
        self.next_id += 1
        now = (datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(days=user_id)).isoformat()
        self.users[user_id] = {"id": user_id, "name": name, "email": email, "created_at": now, "updated_at": now}
        self.passwords[user_id] = password
        return self.public(user_id)

    def public(self, user_id: int) -> dict[str, Any]:
        user = dict(self.users[user_id])
        if not self.include_timestamps:
            user.pop("created_at", None)
            user.pop("updated_at", None)
        return user

    def mutating_requests(self) -> list[tuple[str, str]]:
        return [(method, path) for method, path in self.requests if method != "GET"]


def build_users_app(service: FakeUsersService) -> FastAPI:
    app = FastAPI()

    @app.middleware("http")
    async def record_request(request: Request, call_next):
        service.requests.append((request.method, request.url.path))
        service.authorization.append(request.headers.get("authorization"))
        return await call_next(request)

    @app.get("/api/users/")
    async def list_users() -> list[dict[str, Any]]:
        return [service.public(user_id) for user_id in service.users]

    @app.post("/api/users/", status_code=201)
    async def create_user(body: UserCreateBody) -> dict[str, Any]:
        if any(user["email"] == body.email for user in service.users.values()):
            raise HTTPException(status_code=400, detail="Email already registered")
        created = service.seed(body.name, body.email, body.password)
        return created

    @app.put("/api/users/{user_id}")
    async def update_user(user_id: int, body: UserUpdateBody) -> dict[str, Any]:
        if user_id not in service.users:
            raise HTTPException(status_code=404, detail="User not found")
        if body.new_password is not None:
            if body.current_password != service.passwords[user_id]:
                raise HTTPException(status_code=400, detail="Current password is incorrect")
            service.passwords[user_id] = body.new_password
        user = service.users[user_id]
        if body.name is not None:
            user["name"] = body.name
        if body.email is not None:
            user["email"] = body.email
        user["updated_at"] = datetime(2024, 6, 1, tzinfo=timezone.utc).isoformat()
        return service.public(user_id)

    # registered before /{user_id} so "bulk-delete" is not parsed as an id
    @app.delete("/api/users/bulk-delete")
    async def bulk_delete(body: BulkDeleteBody) -> dict[str, list[int]]:
        deleted: list[int] = []
        failed: list[int] = []
        for user_id in body.userIds:
            if user_id in service.failing_ids or user_id not in service.users:
                failed.append(user_id)
                continue
            del service.users[user_id]
            deleted.append(user_id)
        return {"deleted": deleted, "failed": failed}

    @app.delete("/api/users/{user_id}", status_code=204)
    async def delete_user(user_id: int) -> Response:
        if user_id in service.failing_ids:
            raise HTTPException(status_code=500, detail="Failed to delete user")
        if user_id not in service.users:
            raise HTTPException(status_code=404, detail="User not found")
        del service.users[user_id]
        return Response(status_code=204)

    return app


def make_http_client(transport: httpx.AsyncBaseTransport) -> HttpClient:
    client = httpx.AsyncClient(transport=transport, base_url="http://testserver")
    config = SDKConfig(base_url="http://testserver/", retry_max_attempts=1, retry_backoff_ms=0)
    return HttpClient(config=config, client=client)


@pytest.fixture()
def users_service() -> FakeUsersService:
    service = FakeUsersService()
    service.seed("Alice Adams", "alice@example.com")
    service.seed("Bob Brown", "bob@example.com")
    service.seed("Carol Chen", "carol@example.com")
    return service


@pytest.fixture()
def token_store() -> MemoryTokenStore:
    return MemoryTokenStore("test-token")


@pytest.fixture()
def asgi_transport(users_service: FakeUsersService) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=users_service.app)


@pytest.fixture()
def coordinator_factory(asgi_transport, token_store):
    def _build(strategy: str = "fan_out", store: RecordStore | None = None, transport=None):
        store = store if store is not None else RecordStore()
        adapter = UsersAdapter(make_http_client(transport or asgi_transport), token_store)
        return OperationCoordinator(adapter, store, bulk_strategy=strategy), store

    return _build


@pytest.fixture()
def http_factory():
    return make_http_client
