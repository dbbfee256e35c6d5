from __future__ import annotations

import re

from user_console.app.domain.models.user import UserDraft, UserPatch, UserRecord
from user_console.clients.users_api_sdk.errors import ValidationError


class UserFormPolicy:
    NAME_MIN_LENGTH = 3
    PASSWORD_MIN_LENGTH = 8
    EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

    @classmethod
    def validate_draft(cls, draft: UserDraft) -> dict[str, str]:
        """Return the normalized create payload or raise on the first broken rule."""
        name = _normalize_text(draft.name)
        email = _normalize_text(draft.email)
        password = draft.password or ""

        if len(name) < cls.NAME_MIN_LENGTH:
            _reject("name", f"Name must be at least {cls.NAME_MIN_LENGTH} characters.")
        if not email:
            _reject("email", "Email is required.")
        if not cls.EMAIL_REGEX.match(email):
            _reject("email", "Enter a valid email address.")
        if not password:
            _reject("password", "Password is required.")
        if len(password) < cls.PASSWORD_MIN_LENGTH:
            _reject("password", f"Password must be at least {cls.PASSWORD_MIN_LENGTH} characters.")
        if password != (draft.confirm_password or ""):
            _reject("confirm_password", "Passwords do not match.")
        return {"name": name, "email": email, "password": password}

    @classmethod
    def build_changes(cls, current: UserRecord, patch: UserPatch) -> dict[str, str]:
        """Return the minimal field delta for ``current`` or raise on the first broken rule."""
        changes: dict[str, str] = {}

        if patch.name is not None:
            name = _normalize_text(patch.name)
            if len(name) < cls.NAME_MIN_LENGTH:
                _reject("name", f"Name must be at least {cls.NAME_MIN_LENGTH} characters.")
            if name != current.name:
                changes["name"] = name

        if patch.email is not None:
            email = _normalize_text(patch.email)
            if not cls.EMAIL_REGEX.match(email):
                _reject("email", "Enter a valid email address.")
            if email != current.email:
                changes["email"] = email

        if patch.new_password:
            if len(patch.new_password) < cls.PASSWORD_MIN_LENGTH:
                _reject("new_password", f"New password must be at least {cls.PASSWORD_MIN_LENGTH} characters.")
            if not patch.current_password:
                _reject("current_password", "Current password is required to set a new password.")
            if patch.new_password != patch.confirm_password:
                _reject("confirm_password", "New passwords do not match.")
            changes["current_password"] = patch.current_password
            changes["new_password"] = patch.new_password

        return changes


def _normalize_text(value: str | None) -> str:
    return (value or "").strip()


def _reject(field: str, message: str) -> None:
    raise ValidationError(code="VALIDATION_ERROR", message=message, details={"field": field})
