from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from user_console.clients.users_api_sdk.config import SDKConfig
from user_console.clients.users_api_sdk.errors import RemoteRejected, TransportError

logger = logging.getLogger(__name__)


class HttpClient:
    def __init__(
        self,
        config: SDKConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or SDKConfig()
        self._client = client or httpx.AsyncClient(
            base_url=self.config.normalized_base_url,
            timeout=self.config.timeout_seconds,
            verify=self.config.verify_ssl,
        )
        self._retry_max_attempts = max(1, self.config.retry_max_attempts)
        self._retry_backoff_ms = max(0, self.config.retry_backoff_ms)

    async def request(
        self,
        method: str,
        path: str,
        token: str | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        allow_empty: bool = False,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Only ``GET`` is retried (timeouts, transport errors and 5xx). With
        ``allow_empty`` any 2xx body that is missing or not JSON yields ``None``
        instead of a ``TransportError``.
        """
        request_headers = {"Accept": "application/json", **(headers or {})}
        if token:
            request_headers["Authorization"] = f"Bearer {token}"

        normalized_path = path if path.startswith("/") else f"/{path}"
        allow_retry = method.upper() == "GET"

        for attempt in range(1, self._retry_max_attempts + 1):
            try:
                response = await self._client.request(
                    method,
                    normalized_path,
                    json=json_body,
                    headers=request_headers,
                    params=params,
                )
            except httpx.TimeoutException as exc:
                logger.warning("timeout %s %s attempt=%s", method, normalized_path, attempt)
                if (not allow_retry) or attempt >= self._retry_max_attempts:
                    raise TransportError(
                        code="TIMEOUT_ERROR",
                        message="The users service took too long to respond.",
                        details=str(exc),
                    ) from exc
                await self._backoff(attempt)
                continue
            except httpx.TransportError as exc:
                logger.warning("transport failure %s %s attempt=%s: %s", method, normalized_path, attempt, exc)
                if (not allow_retry) or attempt >= self._retry_max_attempts:
                    raise TransportError(
                        code="NETWORK_ERROR",
                        message="Could not reach the users service.",
                        details=str(exc),
                    ) from exc
                await self._backoff(attempt)
                continue
            except httpx.DecodingError as exc:
                logger.warning("undecodable body %s %s: %s", method, normalized_path, exc)
                raise TransportError(
                    code="PARSE_ERROR",
                    message="Unexpected response from the users service.",
                    details=str(exc),
                ) from exc
            except httpx.RequestError as exc:
                logger.warning("request failure %s %s: %s", method, normalized_path, exc)
                raise TransportError(
                    code="NETWORK_ERROR",
                    message="Could not reach the users service.",
                    details=str(exc),
                ) from exc

            if response.status_code >= 400:
                if allow_retry and self._is_retryable_status(response.status_code) and attempt < self._retry_max_attempts:
                    await self._backoff(attempt)
                    continue
                raise RemoteRejected.from_http_response(response)

            return self._decode(response, allow_empty=allow_empty)

        raise TransportError(code="NETWORK_ERROR", message="Could not reach the users service.", details="retry exhausted")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _backoff(self, attempt: int) -> None:
        await asyncio.sleep((self._retry_backoff_ms * attempt) / 1000)

    @staticmethod
    def _is_retryable_status(status_code: int) -> bool:
        return 500 <= status_code <= 599

    @staticmethod
    def _decode(response: httpx.Response, *, allow_empty: bool) -> Any:
        if not response.content:
            if allow_empty:
                return None
            raise TransportError(
                code="EMPTY_RESPONSE",
                message="Unexpected response from the users service.",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            if allow_empty:
                return None
            raise TransportError(
                code="PARSE_ERROR",
                message="Unexpected response from the users service.",
                details=response.text,
                status_code=response.status_code,
            ) from exc
