from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from user_console.app.application.operation_tickets import OperationTicket
from user_console.app.domain.models.user import UserDraft, UserPatch, UserRecord

CREATE_FIELDS = ("name", "email", "password", "confirm_password")
EDIT_FIELDS = ("name", "email", "current_password", "new_password", "confirm_password")


class FormStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class FormState:
    """Create/edit dialog: stays open with an inline error until a submit succeeds."""

    fields: tuple[str, ...]
    values: dict[str, str] = field(default_factory=dict)
    status: FormStatus = FormStatus.IDLE
    is_open: bool = False
    error: str | None = None
    target_id: int | None = None

    @property
    def submit_enabled(self) -> bool:
        return self.is_open and self.status is not FormStatus.SUBMITTING

    def open(self, values: dict[str, str] | None = None, target_id: int | None = None) -> None:
        self.values = {name: "" for name in self.fields}
        self.values.update(values or {})
        self.target_id = target_id
        self.status = FormStatus.IDLE
        self.error = None
        self.is_open = True

    def update(self, name: str, value: str) -> None:
        if name not in self.fields:
            raise KeyError(name)
        self.values[name] = value

    def begin_submit(self) -> bool:
        if not self.submit_enabled:
            return False
        self.status = FormStatus.SUBMITTING
        self.error = None
        return True

    def apply_ticket(self, ticket: OperationTicket) -> None:
        if ticket.succeeded:
            self.status = FormStatus.SUCCESS
            self.is_open = False
            self.values = {}
            return
        self.status = FormStatus.ERROR
        self.error = ticket.error_detail

    def close(self) -> bool:
        if self.status is FormStatus.SUBMITTING:
            return False
        self.is_open = False
        self.values = {}
        self.error = None
        self.status = FormStatus.IDLE
        return True


def create_form() -> FormState:
    return FormState(fields=CREATE_FIELDS)


def edit_form(record: UserRecord) -> FormState:
    form = FormState(fields=EDIT_FIELDS)
    form.open({"name": record.name, "email": record.email}, target_id=record.id)
    return form


def to_draft(form: FormState) -> UserDraft:
    values = form.values
    return UserDraft(
        name=values.get("name", ""),
        email=values.get("email", ""),
        password=values.get("password", ""),
        confirm_password=values.get("confirm_password", ""),
    )


def to_patch(form: FormState) -> UserPatch:
    values = form.values
    # blank password fields mean "keep the current password"
    return UserPatch(
        name=values.get("name"),
        email=values.get("email"),
        current_password=values.get("current_password") or None,
        new_password=values.get("new_password") or None,
        confirm_password=values.get("confirm_password") or None,
    )
