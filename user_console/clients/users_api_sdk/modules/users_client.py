from __future__ import annotations

from typing import Any

from user_console.clients.users_api_sdk.auth_store import TokenStore
from user_console.clients.users_api_sdk.http_client import HttpClient

USERS_PATH = "/api/users/"


class UsersClient:
    def __init__(self, http: HttpClient, auth_store: TokenStore) -> None:
        self.http = http
        self.auth_store = auth_store

    async def list(self) -> list[dict[str, Any]]:
        result = await self.http.request("GET", USERS_PATH, token=self.auth_store.get_token())
        if isinstance(result, dict):
            return list(result.get("users") or result.get("items") or [])
        return list(result or [])

    async def create(self, name: str, email: str, password: str) -> dict[str, Any]:
        return await self.http.request(
            "POST",
            USERS_PATH,
            token=self.auth_store.get_token(),
            json_body={"name": name, "email": email, "password": password},
        )

    async def update(self, user_id: int, changes: dict[str, str]) -> dict[str, Any]:
        return await self.http.request(
            "PUT",
            f"/api/users/{user_id}",
            token=self.auth_store.get_token(),
            json_body=changes,
        )

    async def delete(self, user_id: int) -> Any:
        return await self.http.request(
            "DELETE",
            f"/api/users/{user_id}",
            token=self.auth_store.get_token(),
            allow_empty=True,
        )

    async def bulk_delete(self, user_ids: list[int]) -> Any:
        return await self.http.request(
            "DELETE",
            "/api/users/bulk-delete",
            token=self.auth_store.get_token(),
            json_body={"userIds": user_ids},
            allow_empty=True,
        )
