import aiohttp
import pytest

from replicate_client.async_utils import FileFormField
from replicate_client.connection import Connection
from replicate_client.errors import (
    NoAPIToken,
    ReplicateAPIError,
    ReplicateTransportError,
)

from .helpers import TEST_API_TOKEN, TEST_BASE_URL, FakeFetch, FakeResponse


def make_connection(fetch, **kwargs):
    kwargs.setdefault("retry_interval", 0)
    kwargs.setdefault("retry_jitter", 0)
    return Connection(
        TEST_API_TOKEN,
        base_url=TEST_BASE_URL,
        user_agent="pytest",
        fetch=fetch,
        **kwargs,
    )


def test_requires_token():
    with pytest.raises(NoAPIToken):
        Connection(None)


def test_url_for():
    connection = make_connection(FakeFetch())
    assert connection.url_for("predictions") == f"{TEST_BASE_URL}/predictions"
    assert connection.url_for("/predictions") == f"{TEST_BASE_URL}/predictions"
    assert (
        connection.url_for("predictions", {"cursor": "abc"})
        == f"{TEST_BASE_URL}/predictions?cursor=abc"
    )
    absolute = "https://elsewhere.test/v1/predictions?cursor=xyz"
    assert connection.url_for(absolute) == absolute


def test_reprs():
    connection = make_connection(FakeFetch())
    assert eval(str(connection)) == connection


@pytest.mark.asyncio
async def test_get_sends_auth_headers_and_decodes_json():
    fetch = FakeFetch(FakeResponse(200, json_body={"id": "abc"}))
    connection = make_connection(fetch)

    assert await connection.get("predictions/abc") == {"id": "abc"}

    (call,) = fetch.calls
    assert call.method == "GET"
    assert call.url == f"{TEST_BASE_URL}/predictions/abc"
    assert call.headers["Authorization"] == f"Bearer {TEST_API_TOKEN}"
    assert call.headers["User-Agent"] == "pytest"
    assert call.data is None


@pytest.mark.asyncio
async def test_post_sends_json():
    response = FakeResponse(201, json_body={"ok": True})
    fetch = FakeFetch(response)
    connection = make_connection(fetch)

    await connection.post({"input": {"text": "hi"}}, "predictions")

    (call,) = fetch.calls
    assert call.method == "POST"
    assert call.headers["Content-Type"] == "application/json"
    assert call.json == {"input": {"text": "hi"}}
    assert response.released


@pytest.mark.asyncio
async def test_no_content_returns_none():
    fetch = FakeFetch(FakeResponse(204))
    connection = make_connection(fetch)
    assert await connection.delete("files/abc") is None


@pytest.mark.asyncio
async def test_form_data_is_rebuilt_for_every_attempt():
    fetch = FakeFetch(FakeResponse(429), FakeResponse(201, json_body={}))
    connection = make_connection(fetch)
    fields = [FileFormField(name="content", value=b"abc", filename="a.bin")]

    await connection.post(fields, "files")

    first, second = fetch.calls
    assert isinstance(first.data, aiohttp.FormData)
    assert isinstance(second.data, aiohttp.FormData)
    assert first.data is not second.data
    assert "Content-Type" not in first.headers


@pytest.mark.asyncio
async def test_get_retries_server_errors():
    fetch = FakeFetch(
        FakeResponse(500), FakeResponse(502), FakeResponse(200, json_body=[])
    )
    connection = make_connection(fetch)
    assert await connection.get("hardware") == []
    assert len(fetch.calls) == 3


@pytest.mark.asyncio
async def test_post_does_not_retry_server_errors():
    fetch = FakeFetch(FakeResponse(500, text="boom"))
    connection = make_connection(fetch)
    with pytest.raises(ReplicateAPIError) as error:
        await connection.post({}, "predictions")
    assert len(fetch.calls) == 1
    assert error.value.status_code == 500
    assert error.value.detail == "boom"
    assert error.value.is_transient


@pytest.mark.asyncio
async def test_client_error_is_raised_with_details():
    fetch = FakeFetch(
        FakeResponse(
            404,
            text='{"detail": "Not found."}',
            headers={"X-Request-Id": "req_1"},
        )
    )
    connection = make_connection(fetch)
    with pytest.raises(ReplicateAPIError) as error:
        await connection.get("predictions/missing")
    assert error.value.status_code == 404
    assert error.value.reason == "Not Found"
    assert error.value.method == "GET"
    assert error.value.endpoint == f"{TEST_BASE_URL}/predictions/missing"
    assert error.value.headers == {"X-Request-Id": "req_1"}
    assert not error.value.is_transient
    assert "Not found." in str(error.value)


@pytest.mark.asyncio
async def test_exhausted_connection_errors_become_transport_errors():
    fetch = FakeFetch(*[aiohttp.ClientConnectionError("refused")] * 2)
    connection = make_connection(fetch, max_retries=1)
    with pytest.raises(ReplicateTransportError) as error:
        await connection.get("account")
    assert isinstance(error.value.cause, aiohttp.ClientConnectionError)
    assert len(fetch.calls) == 2


@pytest.mark.asyncio
async def test_extra_headers_override_defaults():
    fetch = FakeFetch(FakeResponse(200, json_body={}))
    connection = make_connection(fetch)
    await connection.make_request(
        "query", "models", method="QUERY", headers={"Content-Type": "text/plain"}
    )
    (call,) = fetch.calls
    assert call.method == "QUERY"
    assert call.data == "query"
    assert call.headers["Content-Type"] == "text/plain"


@pytest.mark.asyncio
async def test_injected_fetch_is_not_closed():
    class ClosableFetch(FakeFetch):
        closed = False

        async def close(self):
            self.closed = True

    fetch = ClosableFetch()
    await make_connection(fetch).close()
    assert not fetch.closed
