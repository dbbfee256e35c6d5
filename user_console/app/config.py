from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from user_console.clients.users_api_sdk.config import DEFAULT_BASE_URL, SDKConfig


class ConsoleSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="USER_CONSOLE_", env_file=".env", extra="ignore")

    base_url: str = DEFAULT_BASE_URL.rstrip("/")
    timeout_seconds: float = Field(default=30, gt=0)
    verify_ssl: bool = True
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_backoff_ms: int = Field(default=150, ge=0)
    page_size: int = Field(default=10, ge=1)
    bulk_delete_strategy: Literal["fan_out", "bulk_endpoint"] = "fan_out"
    token_store: Literal["file", "memory"] = "file"
    log_level: str = "INFO"

    @field_validator("base_url")
    @classmethod
    def _base_url_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("USER_CONSOLE_BASE_URL must not be empty")
        return cleaned

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    def sdk_config(self) -> SDKConfig:
        return SDKConfig(
            base_url=self.base_url,
            timeout_seconds=self.timeout_seconds,
            verify_ssl=self.verify_ssl,
            retry_max_attempts=self.retry_max_attempts,
            retry_backoff_ms=self.retry_backoff_ms,
        )
