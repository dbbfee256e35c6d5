from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from user_console.app.domain.models.user import UserRecord, as_utc
from user_console.clients.users_api_sdk.auth_store import TokenStore
from user_console.clients.users_api_sdk.errors import TransportError
from user_console.clients.users_api_sdk.http_client import HttpClient
from user_console.clients.users_api_sdk.models import BulkDeleteResult, UserPayload
from user_console.clients.users_api_sdk.modules.users_client import UsersClient


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UsersAdapter:
    """Turns users service payloads into domain records."""

    def __init__(
        self,
        http: HttpClient,
        auth_store: TokenStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.users = UsersClient(http=http, auth_store=auth_store)
        self.clock = clock

    async def list_users(self) -> list[UserRecord]:
        items = await self.users.list()
        now = self.clock()
        return [self._to_record(item, now) for item in items]

    async def create_user(self, name: str, email: str, password: str) -> UserRecord:
        payload = await self.users.create(name=name, email=email, password=password)
        return self._to_record(payload, self.clock())

    async def update_user(self, user_id: int, changes: dict[str, str]) -> UserRecord:
        payload = await self.users.update(user_id, changes)
        return self._to_record(payload, self.clock())

    async def delete_user(self, user_id: int) -> None:
        await self.users.delete(user_id)

    async def bulk_delete_users(self, user_ids: Iterable[int]) -> BulkDeleteResult | None:
        ordered = sorted(user_ids)
        payload = await self.users.bulk_delete(ordered)
        if not isinstance(payload, dict) or not ({"deleted", "failed"} & payload.keys()):
            return None
        try:
            return BulkDeleteResult.model_validate(payload)
        except PydanticValidationError as exc:
            raise TransportError(
                code="PARSE_ERROR",
                message="Unexpected response from the users service.",
                details=str(exc),
            ) from exc

    @staticmethod
    def _to_record(item: Any, now: datetime) -> UserRecord:
        try:
            payload = UserPayload.model_validate(item)
        except PydanticValidationError as exc:
            raise TransportError(
                code="PARSE_ERROR",
                message="Unexpected response from the users service.",
                details=str(exc),
            ) from exc
        return UserRecord(
            id=payload.id,
            name=payload.name,
            email=payload.email,
            created_at=as_utc(payload.created_at or now),
            updated_at=as_utc(payload.updated_at or now),
            deleted_at=as_utc(payload.deleted_at) if payload.deleted_at else None,
        )
