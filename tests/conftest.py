import json
from typing import Any, Dict, List, Mapping, Optional, Union

import pytest

from yamnet.domain.interfaces.transport import Transport, TransportResponse
from yamnet.domain.models.common import HttpRequest, RetryPolicy
from yamnet.infrastructure.config.settings import clear_test_config
from yamnet.infrastructure.serialization.json_serializer import JsonSerializer


class FakeResponse(TransportResponse):
    """In-memory TransportResponse that counts reads and releases."""

    def __init__(self, status_code: int, body: Union[bytes, str, Dict[str, Any], None] = b"",
                 headers: Optional[Mapping[str, str]] = None, read_error: Optional[Exception] = None,
                 close_error: Optional[Exception] = None):
        self._status_code = status_code
        if isinstance(body, dict):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._body = body or b""
        self._headers = dict(headers or {})
        self._read_error = read_error
        self._close_error = close_error
        self.read_count = 0
        self.close_count = 0

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def headers(self) -> Mapping[str, str]:
        return self._headers

    async def read(self) -> bytes:
        self.read_count += 1
        if self._read_error is not None:
            raise self._read_error
        return self._body

    async def aclose(self) -> None:
        self.close_count += 1
        if self._close_error is not None:
            raise self._close_error


class ScriptedTransport(Transport):
    """Transport replaying a script of responses / exceptions, one per send()."""

    def __init__(self, script: List[Union[int, FakeResponse, BaseException]]):
        self.script = list(script)
        self.requests: List[HttpRequest] = []
        self.responses: List[FakeResponse] = []
        self.close_count = 0

    async def send(self, request: HttpRequest) -> TransportResponse:
        self.requests.append(request)
        if not self.script:
            raise AssertionError("ScriptedTransport ran out of scripted responses")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        response = item if isinstance(item, FakeResponse) else FakeResponse(item, {"ok": True})
        self.responses.append(response)
        return response

    async def aclose(self) -> None:
        self.close_count += 1

    @property
    def attempts(self) -> int:
        return len(self.requests)


class RecordingSleep:
    """Replacement for asyncio.sleep that records delays without waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def serializer() -> JsonSerializer:
    return JsonSerializer()


@pytest.fixture
def policy() -> RetryPolicy:
    return RetryPolicy()


@pytest.fixture
def sample_request() -> HttpRequest:
    return HttpRequest(method="GET", url="https://api.test/api/v1/messages.json")


@pytest.fixture(autouse=True)
def reset_test_config():
    yield
    clear_test_config()


MESSAGE_PAYLOAD = {
    "messages": [
        {
            "id": 101,
            "sender_id": 7,
            "thread_id": 101,
            "created_at": "2014/01/31 10:15:00 +0000",
            "message_type": "update",
            "privacy": "public",
            "body": {"plain": "Hello network", "parsed": "Hello network"},
            "liked_by": {"count": 2, "names": []},
            "client_type": "Web",
        },
        {
            "id": 102,
            "sender_id": 8,
            "body": {"plain": "Second"},
        },
    ],
    "meta": {"current_user_id": 7},
    "references": [],
}

USER_PAYLOAD = {
    "id": 7,
    "name": "jdoe",
    "full_name": "Jane Doe",
    "job_title": "Engineer",
    "state": "active",
    "type": "user",
    "activated_at": "2013-05-01T10:00:00+00:00",
    "web_url": "https://www.yammer.com/example.com/users/jdoe",
    "stats": {"followers": 3, "following": 4, "updates": 50},
    "contact": {"im": {"provider": "skype", "username": "jdoe"}, "email_addresses": []},
}
