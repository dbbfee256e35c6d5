import httpx
import pytest

from user_console.clients.users_api_sdk.config import SDKConfig
from user_console.clients.users_api_sdk.errors import RemoteRejected, TransportError
from user_console.clients.users_api_sdk.http_client import HttpClient


def _client(handler, attempts: int = 3) -> HttpClient:
    transport = httpx.MockTransport(handler)
    return HttpClient(
        config=SDKConfig(base_url="https://users.test/", retry_max_attempts=attempts, retry_backoff_ms=0),
        client=httpx.AsyncClient(transport=transport, base_url="https://users.test/"),
    )


@pytest.mark.asyncio
async def test_get_is_retried_on_timeout_but_delete_is_not() -> None:
    call_log: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        call_log.append(request.method)
        if request.method == "GET" and len(call_log) == 1:
            raise httpx.ReadTimeout("slow")
        if request.method == "GET":
            return httpx.Response(200, json=[])
        raise httpx.ReadTimeout("slow delete")

    http = _client(handler)

    assert await http.request("GET", "/api/users/") == []
    with pytest.raises(TransportError) as exc_info:
        await http.request("DELETE", "/api/users/1", allow_empty=True)

    assert exc_info.value.code == "TIMEOUT_ERROR"
    assert call_log == ["GET", "GET", "DELETE"]


@pytest.mark.asyncio
async def test_get_retries_5xx_until_attempts_exhausted() -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(503, json={"detail": "maintenance"})

    http = _client(handler, attempts=2)

    with pytest.raises(RemoteRejected) as exc_info:
        await http.request("GET", "/api/users/")

    assert calls["count"] == 2
    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "maintenance"


@pytest.mark.asyncio
async def test_bearer_token_is_sent_when_present() -> None:
    seen: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200, json=[])

    http = _client(handler)
    await http.request("GET", "/api/users/", token="abc")
    await http.request("GET", "/api/users/")

    assert seen == ["Bearer abc", None]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(204),
        httpx.Response(200, text="deleted"),
        httpx.Response(200, json={"message": "deleted"}),
    ],
)
async def test_allow_empty_accepts_any_success_body(response: httpx.Response) -> None:
    http = _client(lambda request: response)

    result = await http.request("DELETE", "/api/users/4", allow_empty=True)

    assert result in (None, {"message": "deleted"})


@pytest.mark.asyncio
async def test_unparseable_success_body_is_transport_error() -> None:
    http = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(TransportError) as exc_info:
        await http.request("POST", "/api/users/", json_body={"name": "x"})

    assert exc_info.value.code == "PARSE_ERROR"
    assert exc_info.value.message == "Unexpected response from the users service."


@pytest.mark.asyncio
async def test_structured_422_is_remote_rejected_with_details() -> None:
    detail = [{"loc": ["body", "email"], "msg": "value is not a valid email address"}]
    http = _client(lambda request: httpx.Response(422, json={"detail": detail}, headers={"X-Trace-ID": "t-1"}))

    with pytest.raises(RemoteRejected) as exc_info:
        await http.request("PUT", "/api/users/1", json_body={"email": "x@y.z"})

    assert exc_info.value.code == "VALIDATION_ERROR"
    assert exc_info.value.details == detail
    assert exc_info.value.trace_id == "t-1"


@pytest.mark.asyncio
async def test_connect_error_is_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused")

    http = _client(handler, attempts=1)

    with pytest.raises(TransportError) as exc_info:
        await http.request("GET", "/api/users/")

    assert exc_info.value.code == "NETWORK_ERROR"
    assert exc_info.value.message == "Could not reach the users service."


@pytest.mark.asyncio
async def test_undecodable_body_is_parse_error_without_retry() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip")

    http = _client(handler)

    with pytest.raises(TransportError) as exc_info:
        await http.request("GET", "/api/users/")

    assert exc_info.value.code == "PARSE_ERROR"
    assert calls == ["GET"]


@pytest.mark.asyncio
async def test_other_request_errors_are_network_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TooManyRedirects("redirect loop", request=request)

    http = _client(handler)

    with pytest.raises(TransportError) as exc_info:
        await http.request("DELETE", "/api/users/1", allow_empty=True)

    assert exc_info.value.code == "NETWORK_ERROR"
