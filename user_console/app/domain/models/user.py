from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


def as_utc(value: datetime) -> datetime:
    """Read a naive timestamp as UTC; aware ones are returned unchanged."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class UserRecord:
    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


@dataclass(frozen=True)
class UserDraft:
    name: str
    email: str
    password: str
    confirm_password: str


@dataclass(frozen=True)
class UserPatch:
    """Edit form values; ``None`` means the field was not supplied."""

    name: str | None = None
    email: str | None = None
    current_password: str | None = None
    new_password: str | None = None
    confirm_password: str | None = None
