"""Shared fixtures and transport doubles for the ds_api tests."""

import logging
from typing import Callable, List, Optional, Sequence, Union

import httpx
import pytest

from tests.fake_server import BASE_URL

# =============================================================================
# Test Doubles
# =============================================================================


class ScriptedByteStream(httpx.AsyncByteStream):
    """
    Response body produced piece by piece from a script.

    A piece that is an exception instance is raised instead of yielded.
    ``pulled`` counts pieces handed to httpx, ``closed`` records aclose().
    """

    def __init__(self, pieces: Sequence[Union[bytes, Exception]]):
        self.pieces = list(pieces)
        self.pulled = 0
        self.closed = False

    async def __aiter__(self):
        for piece in self.pieces:
            if isinstance(piece, Exception):
                raise piece
            self.pulled += 1
            yield piece

    async def aclose(self) -> None:
        self.closed = True


class ScriptedTransport:
    """Builds an httpx client whose every request gets the same scripted answer."""

    def __init__(self, status_code: int = 200, pieces: Sequence[Union[bytes, Exception]] = ()):
        self.status_code = status_code
        self.stream = ScriptedByteStream(pieces)
        self.requests: List[httpx.Request] = []
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, stream=self.stream)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url=BASE_URL)


def event(data: str) -> bytes:
    return f"data: {data}\n\n".encode()


def chunk_json(content: str, chat_id: str = "chatcmpl-1", finish_reason: Optional[str] = None) -> str:
    reason = "null" if finish_reason is None else f'"{finish_reason}"'
    return (
        f'{{"id":"{chat_id}","object":"chat.completion.chunk","created":1770982234,'
        f'"model":"deepseek-chat","system_fingerprint":"fp_test",'
        f'"choices":[{{"index":0,"delta":{{"content":"{content}"}},"logprobs":null,"finish_reason":{reason}}}]}}'
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def scripted() -> Callable[..., ScriptedTransport]:
    return ScriptedTransport


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep real credentials and endpoints out of the tests."""
    for name in ("DEEPSEEK_API_KEY", "DEEPSEEK_BASE_URL", "DEEPSEEK_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _capture_debug_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="ds_api")
