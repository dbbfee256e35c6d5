from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from platformdirs import user_data_dir
from pydantic import ValidationError as PydanticValidationError

from user_console.clients.users_api_sdk.models import SessionData

TOKEN_KEY = "access_token"


class TokenStore(Protocol):
    def get_token(self) -> str | None: ...

    def set_token(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    def __init__(self, token: str | None = None) -> None:
        self.token: str | None = token

    def set_token(self, token: str) -> None:
        self.token = token

    def get_token(self) -> str | None:
        return self.token

    def clear(self) -> None:
        self.token = None


@dataclass
class FileTokenStore:
    """Durable token storage: one JSON file under the user data directory."""

    app_name: str = "user_console"
    filename: str = "session.json"
    directory: Path | None = None

    def _path(self) -> Path:
        base = self.directory or Path(user_data_dir(self.app_name, "user_console"))
        base.mkdir(parents=True, exist_ok=True)
        return base / self.filename

    def set_token(self, token: str) -> None:
        path = self._path()
        path.write_text(json.dumps({TOKEN_KEY: token}, indent=2), encoding="utf-8")
        try:
            path.chmod(0o600)
        except OSError:
            pass

    def get_token(self) -> str | None:
        path = self._path()
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            session = SessionData.model_validate(data)
        except (ValueError, PydanticValidationError):
            self.clear()
            return None
        return session.access_token or None

    def clear(self) -> None:
        path = self._path()
        if path.exists():
            path.unlink()
