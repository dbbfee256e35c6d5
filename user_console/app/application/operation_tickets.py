from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from user_console.app.domain.models.user import UserRecord


class OperationKind(str, Enum):
    LIST = "list"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    BULK_DELETE = "bulk_delete"


class OperationStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class OperationTicket:
    """One remote operation from dispatch until the screen has consumed its outcome."""

    kind: OperationKind
    target_ids: frozenset[int] = frozenset()
    status: OperationStatus = OperationStatus.PENDING
    error_detail: str | None = None
    error: Exception | None = None
    record: UserRecord | None = None
    removed_ids: frozenset[int] = frozenset()
    failed_ids: frozenset[int] = frozenset()

    @property
    def is_pending(self) -> bool:
        return self.status is OperationStatus.PENDING

    @property
    def succeeded(self) -> bool:
        return self.status is OperationStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status is OperationStatus.FAILED

    def succeed(self, record: UserRecord | None = None, removed_ids: Iterable[int] = ()) -> OperationTicket:
        self.status = OperationStatus.SUCCEEDED
        self.record = record
        self.removed_ids = frozenset(removed_ids)
        return self

    def fail(
        self,
        error: Exception,
        detail: str,
        failed_ids: Iterable[int] = (),
        removed_ids: Iterable[int] = (),
    ) -> OperationTicket:
        self.status = OperationStatus.FAILED
        self.error = error
        self.error_detail = detail
        self.failed_ids = frozenset(failed_ids)
        self.removed_ids = frozenset(removed_ids)
        return self
