from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from user_console.app.application.operation_coordinator import OperationCoordinator
from user_console.app.application.operation_tickets import OperationKind, OperationTicket
from user_console.app.domain.models.user import UserRecord


class ConfirmationState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    PENDING = "pending"


class ConfirmationOutcome(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ConfirmationTarget:
    kind: OperationKind
    records: tuple[UserRecord, ...]

    @property
    def ids(self) -> frozenset[int]:
        return frozenset(record.id for record in self.records)

    def prompt(self) -> str:
        if self.kind is OperationKind.DELETE:
            record = self.records[0]
            return f"Delete user '{record.name}' <{record.email}>? This cannot be undone."
        return f"Delete {len(self.records)} selected users? This cannot be undone."


class ConfirmationFlow:
    """Gate for destructive operations: open, then confirm or cancel, then closed again.

    The target is captured when the dialog opens, so later selection changes
    never retarget it. While the confirmed call is pending the flow ignores
    further confirm and cancel requests.
    """

    def __init__(self, coordinator: OperationCoordinator) -> None:
        self.coordinator = coordinator
        self.state = ConfirmationState.CLOSED
        self.target: ConfirmationTarget | None = None
        self.last_outcome: ConfirmationOutcome | None = None
        self.alert: str | None = None

    @property
    def is_busy(self) -> bool:
        return self.state is ConfirmationState.PENDING

    def open_single(self, record: UserRecord) -> bool:
        return self._open(ConfirmationTarget(kind=OperationKind.DELETE, records=(record,)))

    def open_bulk(self, records: Iterable[UserRecord]) -> bool:
        snapshot = tuple(records)
        if not snapshot:
            return False
        return self._open(ConfirmationTarget(kind=OperationKind.BULK_DELETE, records=snapshot))

    def cancel(self) -> bool:
        if self.state is not ConfirmationState.OPEN:
            return False
        self._close(ConfirmationOutcome.CANCELLED)
        return True

    async def confirm(self) -> OperationTicket | None:
        if self.state is not ConfirmationState.OPEN or self.target is None:
            return None
        target = self.target
        self.state = ConfirmationState.PENDING
        try:
            if target.kind is OperationKind.DELETE:
                ticket = await self.coordinator.delete_one(target.records[0].id)
            else:
                ticket = await self.coordinator.delete_many(target.ids)
        finally:
            self._close(ConfirmationOutcome.CONFIRMED)

        if ticket.failed:
            self.alert = ticket.error_detail
        self.coordinator.acknowledge(ticket)
        return ticket

    def dismiss_alert(self) -> None:
        self.alert = None

    def _open(self, target: ConfirmationTarget) -> bool:
        if self.state is not ConfirmationState.CLOSED:
            return False
        self.target = target
        self.state = ConfirmationState.OPEN
        self.last_outcome = None
        return True

    def _close(self, outcome: ConfirmationOutcome) -> None:
        self.state = ConfirmationState.CLOSED
        self.target = None
        self.last_outcome = outcome
