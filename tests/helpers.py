import asyncio
import http
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

TEST_API_TOKEN = "r8_pytest_fake_token"
TEST_BASE_URL = "https://api.replicate.test/v1"
TEST_PREDICTION_ID = "ufawqhfynnddngldkgtslldrkq"
TEST_TRAINING_ID = "zz4ibbonubfz7carwiefibzgga"
TEST_VERSION = "5c7d5dc6dd8bf75c1acaa8565735e7986bc5b66206b55cca93cb72c9bf15ccaa"
TEST_MODEL = "replicate/hello-world"
TEST_STREAM_URL = f"https://stream.replicate.test/v1/streams/{TEST_PREDICTION_ID}"


class FakeStreamReader:
    """Mimics ``aiohttp.StreamReader.iter_any``."""

    def __init__(self, chunks, error: Optional[BaseException] = None, hang=False):
        self.chunks = list(chunks)
        self.error = error
        self.hang = hang
        self.chunks_read = 0

    async def iter_any(self):
        for chunk in self.chunks:
            self.chunks_read += 1
            yield chunk
        if self.error is not None:
            raise self.error
        if self.hang:
            await asyncio.Event().wait()


class FakeResponse:
    """The subset of ``aiohttp.ClientResponse`` the client relies on."""

    def __init__(
        self,
        status: int = 200,
        json_body: Any = None,
        text: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        chunks=(),
        stream_error: Optional[BaseException] = None,
        hang: bool = False,
    ):
        self.status = status
        self.reason = http.HTTPStatus(status).phrase
        self.headers = headers or {}
        if text is None:
            text = json.dumps(json_body) if json_body is not None else ""
        self._text = text
        self.content = FakeStreamReader(chunks, error=stream_error, hang=hang)
        self.released = False
        self.closed = False

    async def json(self, content_type=None):  # pylint: disable=unused-argument
        return json.loads(self._text)

    async def text(self):
        return self._text

    def release(self):
        self.released = True

    def close(self):
        self.closed = True


@dataclass
class Call:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    data: Any = None
    stream: bool = False

    @property
    def json(self):
        return json.loads(self.data)


class FakeFetch:
    """Replays scripted responses, or raises scripted exceptions, in order and
    records every call it receives."""

    def __init__(self, *responses):
        self.responses: List[Any] = list(responses)
        self.calls: List[Call] = []

    def add(self, *responses):
        self.responses.extend(responses)

    async def __call__(self, method, url, *, headers=None, data=None, stream=False):
        self.calls.append(Call(method, url, dict(headers or {}), data, stream))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


def job_json(
    status: str = "starting",
    job_id: str = TEST_PREDICTION_ID,
    stream_url: Optional[str] = None,
    **fields,
) -> Dict[str, Any]:
    urls = {
        "get": f"{TEST_BASE_URL}/predictions/{job_id}",
        "cancel": f"{TEST_BASE_URL}/predictions/{job_id}/cancel",
    }
    if stream_url:
        urls["stream"] = stream_url
    payload = {
        "id": job_id,
        "version": TEST_VERSION,
        "status": status,
        "input": {"text": "Alice"},
        "output": None,
        "error": None,
        "logs": "",
        "created_at": "2024-01-02T03:04:05.000000Z",
        "urls": urls,
    }
    payload.update(fields)
    return payload


def json_response(status: str = "starting", http_status: int = 200, **fields):
    return FakeResponse(http_status, json_body=job_json(status, **fields))


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float):
        self.delays.append(delay)
