from __future__ import annotations

from dataclasses import dataclass

DEFAULT_BASE_URL = "http://localhost:8000/"


@dataclass(frozen=True)
class SDKConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 30
    verify_ssl: bool = True
    retry_max_attempts: int = 3
    retry_backoff_ms: int = 150

    @property
    def normalized_base_url(self) -> str:
        normalized = self.base_url.strip()
        if not normalized:
            return DEFAULT_BASE_URL
        return normalized if normalized.endswith("/") else f"{normalized}/"
