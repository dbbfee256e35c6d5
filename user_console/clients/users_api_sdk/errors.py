from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: dict[str, Any] | list[Any] | str | None = None
    trace_id: str | None = None
    status_code: int | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(ApiError):
    """Client-side validation failed; the request was never sent."""


class RemoteRejected(ApiError):
    """The users service answered with a non-success status."""

    @classmethod
    def from_http_response(cls, response: httpx.Response) -> "RemoteRejected":
        trace_id = response.headers.get("X-Trace-ID") or response.headers.get("X-Trace-Id")
        try:
            payload = response.json()
        except ValueError:
            return cls(
                code="HTTP_ERROR",
                message=response.text or f"HTTP {response.status_code}",
                details=None,
                trace_id=trace_id,
                status_code=response.status_code,
            )

        if isinstance(payload, dict):
            detail = payload.get("detail")
            message = detail if isinstance(detail, str) else payload.get("message")
            return cls(
                code=str(payload.get("code") or _code_for_status(response.status_code)),
                message=str(message or f"HTTP {response.status_code}"),
                details=detail if detail is not None else payload.get("details"),
                trace_id=payload.get("trace_id") or trace_id,
                status_code=response.status_code,
            )

        return cls(
            code=_code_for_status(response.status_code),
            message=f"HTTP {response.status_code}",
            details=payload,
            trace_id=trace_id,
            status_code=response.status_code,
        )


class TransportError(ApiError):
    """Network failure, timeout or unparseable response body."""


_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
}


def _code_for_status(status_code: int) -> str:
    if status_code >= 500:
        return "INTERNAL_ERROR"
    return _STATUS_CODES.get(status_code, "HTTP_ERROR")
