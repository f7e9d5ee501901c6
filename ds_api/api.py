"""
HTTP execution of chat-completion requests
"""

import logging
from typing import TYPE_CHECKING, Dict, Optional, Union

import httpx
from pydantic import ValidationError

from .config import chat_completions_url, get_settings
from .exceptions import DeserializationError, HttpStatusError, TransportError
from .models import ChatCompletionRequest
from .responses import ChatCompletionResponse
from .streaming import ChunkResult, decode_chunks, iter_lines, iter_sse_events

if TYPE_CHECKING:
    from .request import Request

logger = logging.getLogger(__name__)


class ChunkStream:
    """
    Live sequence of decoded stream items.

    Items are ``ChatCompletionChunk`` values, or ``DeserializationError`` /
    ``TransportError`` values for events that could not be used. The stream
    is consumed once. Leaving it early is a normal cancellation: call
    ``aclose()`` (or use ``async with``) to release the connection.

        async with await request.execute_streaming(token) as stream:
            async for item in stream:
                if isinstance(item, DeepSeekError):
                    continue
                print(item.content(), end="")
    """

    def __init__(self, response: httpx.Response, owned_client: Optional[httpx.AsyncClient] = None):
        self._response = response
        self._owned_client = owned_client
        self._events = iter_sse_events(iter_lines(response.aiter_text()))
        self._items = decode_chunks(self._events)
        self._closed = False

    @property
    def response(self) -> httpx.Response:
        return self._response

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "ChunkStream":
        return self

    async def __anext__(self) -> ChunkResult:
        if self._closed:
            raise StopAsyncIteration
        try:
            return await self._items.__anext__()
        except StopAsyncIteration:
            await self.aclose()
            raise

    async def aclose(self) -> None:
        """Stop decoding and close the HTTP response; safe to call more than once"""
        if self._closed:
            return
        self._closed = True
        try:
            await self._items.aclose()
            await self._events.aclose()
            await self._response.aclose()
        finally:
            if self._owned_client is not None:
                await self._owned_client.aclose()
        logger.debug("Chunk stream closed")

    async def __aenter__(self) -> "ChunkStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def _envelope(request: Union["Request", ChatCompletionRequest]) -> ChatCompletionRequest:
    if isinstance(request, ChatCompletionRequest):
        return request.model_copy(deep=True)
    return request.raw


def _resolve_url(base_url: Optional[str], url: Optional[str]) -> str:
    if url:
        return url
    return chat_completions_url(base_url or get_settings().base_url)


def _headers(token: str, stream: bool) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "text/event-stream" if stream else "application/json",
    }


def _new_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=get_settings().timeout)


async def execute_nostreaming(
    request: Union["Request", ChatCompletionRequest],
    token: str,
    *,
    base_url: Optional[str] = None,
    url: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> ChatCompletionResponse:
    """
    Send the request and parse the complete response.

    Args:
        request: Builder value or raw envelope
        token: Bearer token
        base_url: API root, /chat/completions is appended (defaults to DEEPSEEK_BASE_URL)
        url: Full endpoint URL, overrides base_url
        client: Shared httpx client; a temporary one is used when omitted

    Raises:
        TransportError, HttpStatusError, DeserializationError
    """
    envelope = _envelope(request)
    if envelope.stream:
        envelope.stream = None
        envelope.stream_options = None

    target = _resolve_url(base_url, url)
    logger.debug(f"POST {target} model={envelope.model.value} messages={len(envelope.messages)}")

    http = client or _new_client()
    try:
        response = await http.post(target, json=envelope.to_payload(), headers=_headers(token, stream=False))
    except httpx.RequestError as e:
        raise TransportError(f"Request to {target} failed: {e}") from e
    finally:
        if client is None:
            await http.aclose()

    if not response.is_success:
        logger.warning(f"DeepSeek answered HTTP {response.status_code}")
        raise HttpStatusError(response.status_code, response.text)

    try:
        return ChatCompletionResponse.model_validate_json(response.content)
    except ValidationError as e:
        raise DeserializationError(f"Unexpected completion body: {e}", payload=response.text) from e


async def execute_streaming(
    request: Union["Request", ChatCompletionRequest],
    token: str,
    *,
    base_url: Optional[str] = None,
    url: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> ChunkStream:
    """
    Send the request with ``stream`` forced on and return the decoded stream.

    A non-2xx answer is read in full and raised as HttpStatusError before any
    item is produced. Arguments are the same as for execute_nostreaming.

    The returned stream holds the connection open until it is exhausted or
    closed. Breaking out of ``async for`` early leaves the response, and the
    temporary client used when ``client`` is omitted, open until ``aclose()``
    is called; prefer ``async with``.
    """
    envelope = _envelope(request)
    envelope.stream = True

    target = _resolve_url(base_url, url)
    logger.debug(f"POST {target} (stream) model={envelope.model.value} messages={len(envelope.messages)}")

    http = client or _new_client()
    try:
        http_request = http.build_request(
            "POST", target, json=envelope.to_payload(), headers=_headers(token, stream=True)
        )
        response = await http.send(http_request, stream=True)
        if not response.is_success:
            try:
                await response.aread()
            finally:
                await response.aclose()
            logger.warning(f"DeepSeek answered HTTP {response.status_code} to a streaming request")
            raise HttpStatusError(response.status_code, response.text)
    except httpx.RequestError as e:
        if client is None:
            await http.aclose()
        raise TransportError(f"Request to {target} failed: {e}") from e
    except BaseException:
        if client is None:
            await http.aclose()
        raise

    return ChunkStream(response, owned_client=http if client is None else None)
