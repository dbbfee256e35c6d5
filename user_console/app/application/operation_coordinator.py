from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from enum import Enum

from user_console.app.application.operation_tickets import OperationKind, OperationTicket
from user_console.app.application.state.record_store import RecordStore
from user_console.app.domain.models.user import UserDraft, UserPatch
from user_console.app.domain.policies.user_form_policy import UserFormPolicy
from user_console.app.infrastructure.errors.error_mapper import ErrorMapper
from user_console.app.infrastructure.logging.logger import log_action
from user_console.app.infrastructure.sdk_adapter.users_adapter import UsersAdapter
from user_console.clients.users_api_sdk.errors import ApiError, RemoteRejected, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES = {
    OperationKind.LIST: "Failed to load users.",
    OperationKind.CREATE: "Failed to create user.",
    OperationKind.EDIT: "Failed to update user.",
    OperationKind.DELETE: "Failed to delete user.",
    OperationKind.BULK_DELETE: "Failed to delete the selected users.",
}


class BulkDeleteStrategy(str, Enum):
    FAN_OUT = "fan_out"
    BULK_ENDPOINT = "bulk_endpoint"


class OperationCoordinator:
    """Runs user operations against the users service and commits results to the store.

    Every public operation returns an ``OperationTicket``; failures from the
    service (``ApiError`` and subclasses) end up on the ticket, never raised.
    The store is only touched after a successful call, and a fan-out bulk
    delete is committed all-or-nothing.
    """

    def __init__(
        self,
        adapter: UsersAdapter,
        store: RecordStore,
        bulk_strategy: BulkDeleteStrategy | str = BulkDeleteStrategy.FAN_OUT,
    ) -> None:
        self.adapter = adapter
        self.store = store
        self.bulk_strategy = BulkDeleteStrategy(bulk_strategy)
        self.tickets: list[OperationTicket] = []

    def is_busy(self, kind: OperationKind | None = None) -> bool:
        return any(ticket.is_pending and (kind is None or ticket.kind is kind) for ticket in self.tickets)

    def acknowledge(self, ticket: OperationTicket) -> None:
        if ticket in self.tickets:
            self.tickets.remove(ticket)

    async def load(self) -> OperationTicket:
        ticket = self._open(OperationKind.LIST)
        try:
            records = await self.adapter.list_users()
        except ApiError as error:
            return self._failed(ticket, error)
        self.store.replace_all(records)
        return self._succeeded(ticket)

    async def create(self, draft: UserDraft) -> OperationTicket:
        ticket = self._open(OperationKind.CREATE)
        try:
            payload = UserFormPolicy.validate_draft(draft)
            record = await self.adapter.create_user(**payload)
        except ApiError as error:
            return self._failed(ticket, error)
        self.store.upsert(record)
        ticket.target_ids = frozenset({record.id})
        return self._succeeded(ticket, record=record)

    async def edit(self, user_id: int, patch: UserPatch) -> OperationTicket:
        ticket = self._open(OperationKind.EDIT, {user_id})
        current = self.store.get(user_id)
        try:
            if current is None:
                raise ValidationError(
                    code="VALIDATION_ERROR",
                    message=f"User {user_id} is not loaded.",
                    details={"field": "id"},
                )
            changes = UserFormPolicy.build_changes(current, patch)
            if not changes:
                return self._succeeded(ticket, record=current)
            record = await self.adapter.update_user(user_id, changes)
        except ApiError as error:
            return self._failed(ticket, error)
        self.store.upsert(record)
        return self._succeeded(ticket, record=record)

    async def delete_one(self, user_id: int) -> OperationTicket:
        ticket = self._open(OperationKind.DELETE, {user_id})
        try:
            await self.adapter.delete_user(user_id)
        except ApiError as error:
            return self._failed(ticket, error, failed_ids={user_id})
        removed = self.store.remove_many({user_id})
        return self._succeeded(ticket, removed_ids=removed)

    async def delete_many(self, user_ids: Iterable[int]) -> OperationTicket:
        ticket = self._open(OperationKind.BULK_DELETE, user_ids)
        if not ticket.target_ids:
            error = ValidationError(code="VALIDATION_ERROR", message="Select at least one user to delete.")
            return self._failed(ticket, error)
        if self.bulk_strategy is BulkDeleteStrategy.BULK_ENDPOINT:
            return await self._delete_with_bulk_endpoint(ticket)
        return await self._delete_with_fan_out(ticket)

    async def _delete_with_fan_out(self, ticket: OperationTicket) -> OperationTicket:
        ordered = sorted(ticket.target_ids)
        results = await asyncio.gather(
            *(self.adapter.delete_user(user_id) for user_id in ordered),
            return_exceptions=True,
        )
        failures: dict[int, BaseException] = {}
        for user_id, result in zip(ordered, results):
            if isinstance(result, BaseException):
                if not isinstance(result, ApiError):
                    raise result
                failures[user_id] = result

        if failures:
            first_error = failures[min(failures)]
            detail = _bulk_failure_message(failures.keys(), len(ordered), first_error)
            return self._failed(ticket, first_error, failed_ids=failures.keys(), detail=detail)

        removed = self.store.remove_many(ordered)
        return self._succeeded(ticket, removed_ids=removed)

    async def _delete_with_bulk_endpoint(self, ticket: OperationTicket) -> OperationTicket:
        try:
            result = await self.adapter.bulk_delete_users(ticket.target_ids)
        except ApiError as error:
            return self._failed(ticket, error, failed_ids=ticket.target_ids)

        if result is None:
            removed = self.store.remove_many(ticket.target_ids)
            return self._succeeded(ticket, removed_ids=removed)

        deleted = set(result.deleted) & ticket.target_ids
        failed = ticket.target_ids - deleted
        removed = self.store.remove_many(deleted)
        if not failed:
            return self._succeeded(ticket, removed_ids=removed)

        error = RemoteRejected(
            code="PARTIAL_FAILURE",
            message="Some users could not be deleted.",
            details={"failed": sorted(failed)},
        )
        detail = _bulk_failure_message(failed, len(ticket.target_ids), None)
        return self._failed(ticket, error, failed_ids=failed, removed_ids=removed, detail=detail)

    def _open(self, kind: OperationKind, target_ids: Iterable[int] = ()) -> OperationTicket:
        ticket = OperationTicket(kind=kind, target_ids=frozenset(target_ids))
        self.tickets.append(ticket)
        return ticket

    def _succeeded(self, ticket: OperationTicket, **outcome) -> OperationTicket:
        ticket.succeed(**outcome)
        log_action(logger, "users", ticket.kind.value, ticket.target_ids, outcome="succeeded")
        return ticket

    def _failed(
        self,
        ticket: OperationTicket,
        error: ApiError,
        failed_ids: Iterable[int] = (),
        removed_ids: Iterable[int] = (),
        detail: str | None = None,
    ) -> OperationTicket:
        message = detail or _display_message(ticket.kind, error)
        ticket.fail(error, message, failed_ids=failed_ids, removed_ids=removed_ids)
        log_action(logger, "users", ticket.kind.value, ticket.target_ids, outcome="failed", error_code=error.code)
        return ticket


def _display_message(kind: OperationKind, error: ApiError) -> str:
    fallback = DEFAULT_MESSAGES[kind]
    message = ErrorMapper.to_display_message(error, fallback)
    if kind is OperationKind.LIST and message != fallback:
        return f"{fallback}\n{message}"
    return message


def _bulk_failure_message(failed_ids: Iterable[int], total: int, error: ApiError | None) -> str:
    failed = sorted(failed_ids)
    summary = f"Failed to delete {len(failed)} of {total} users (ids: {', '.join(str(user_id) for user_id in failed)})."
    if error is None:
        return summary
    return f"{summary}\n{ErrorMapper.to_display_message(error, DEFAULT_MESSAGES[OperationKind.DELETE])}"
