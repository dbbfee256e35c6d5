from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


class FieldError(BaseModel):
    model_config = ConfigDict(extra="ignore")

    loc: list[str | int] = Field(default_factory=list)
    msg: str


class ErrorBody(BaseModel):
    """Error body of the users service: ``detail`` is a message or a list of field errors."""

    model_config = ConfigDict(extra="ignore")

    detail: str | list[FieldError] | None = None


class BulkDeleteResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    deleted: list[int] = Field(default_factory=list)
    failed: list[int] = Field(default_factory=list)


class SessionData(BaseModel):
    access_token: str
