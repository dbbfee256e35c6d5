from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from user_console.clients.users_api_sdk.errors import ApiError, RemoteRejected
from user_console.clients.users_api_sdk.models import ErrorBody, FieldError


@dataclass(frozen=True)
class DetailMessage:
    text: str


@dataclass(frozen=True)
class FieldErrorList:
    errors: tuple[FieldError, ...]


ErrorDetail = DetailMessage | FieldErrorList


class ErrorMapper:
    FIELD_LABELS = {
        "name": "Name",
        "email": "Email",
        "password": "Password",
        "current_password": "Current password",
        "new_password": "New password",
        "confirm_password": "Password confirmation",
        "userIds": "Selected users",
    }

    MESSAGE_RULES = (
        ("at least 3 characters", "Must be at least 3 characters."),
        ("not a valid email address", "Enter a valid email address."),
        ("at least 8 characters", "Must be at least 8 characters."),
    )

    UNEXPECTED_MESSAGE = "Something went wrong."

    @classmethod
    def parse_detail(cls, details: Any) -> ErrorDetail | None:
        if details is None:
            return None
        try:
            body = ErrorBody.model_validate({"detail": details})
        except PydanticValidationError:
            return None
        if isinstance(body.detail, str):
            return DetailMessage(body.detail) if body.detail.strip() else None
        if body.detail:
            return FieldErrorList(tuple(body.detail))
        return None

    @classmethod
    def field_label(cls, loc: Sequence[str | int]) -> str:
        # FastAPI prefixes the location with "body", "query", ...
        parts = [str(part) for part in loc if part not in ("body", "query", "path")]
        if not parts:
            return "Request"
        return cls.FIELD_LABELS.get(parts[-1], ".".join(parts))

    @classmethod
    def rule_message(cls, msg: str) -> str:
        for fragment, message in cls.MESSAGE_RULES:
            if fragment in msg:
                return message
        return msg

    @classmethod
    def flatten_field_errors(cls, errors: Sequence[FieldError]) -> str:
        return "\n".join(f"{cls.field_label(error.loc)}: {cls.rule_message(error.msg)}" for error in errors)

    @classmethod
    def to_display_message(cls, error: Exception, fallback: str | None = None) -> str:
        """Collapse any operation failure into the single line(s) a dialog shows."""
        if isinstance(error, RemoteRejected):
            detail = cls.parse_detail(error.details)
            if isinstance(detail, FieldErrorList):
                return cls.flatten_field_errors(detail.errors)
            if isinstance(detail, DetailMessage):
                return detail.text
            return fallback or error.message
        if isinstance(error, ApiError):
            return error.message or fallback or cls.UNEXPECTED_MESSAGE
        return fallback or cls.UNEXPECTED_MESSAGE

    @classmethod
    def to_payload(cls, error: Exception, fallback: str | None = None) -> dict[str, Any]:
        if isinstance(error, ApiError):
            return {
                "code": error.code,
                "message": cls.to_display_message(error, fallback),
                "status_code": error.status_code,
                "trace_id": error.trace_id,
            }
        return {
            "code": "INTERNAL_ERROR",
            "message": cls.to_display_message(error, fallback),
            "status_code": None,
            "trace_id": None,
        }
