"""
Server-Sent Events (SSE) decoding for streamed chat completions
"""

import logging
import re
from typing import AsyncIterator, List, Optional, Union

import httpx
from pydantic import BaseModel, ValidationError

from .exceptions import DeepSeekError, DeserializationError, TransportError
from .responses import ChatCompletionChunk

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"

ChunkResult = Union[ChatCompletionChunk, DeepSeekError]

_LINE_END = re.compile(r"\r\n|\r|\n")


class ServerSentEvent(BaseModel):
    """A dispatched SSE event"""
    event: str = "message"
    data: str = ""
    id: Optional[str] = None
    retry: Optional[int] = None


async def iter_lines(chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    """
    Split decoded text into lines on CRLF, LF or CR only.

    ``str.splitlines`` (and so ``httpx.Response.aiter_lines``) also breaks on
    U+2028 and other separators that may appear raw inside JSON payloads.
    """
    buffer = ""
    async for chunk in chunks:
        # Only the new text (and a held-back CR) can hold a line ending
        pos = len(buffer) - 1 if buffer.endswith("\r") else len(buffer)
        buffer += chunk
        start = 0
        while True:
            match = _LINE_END.search(buffer, pos)
            # A trailing CR may be the first half of a CRLF split across chunks
            if match is None or (match.group() == "\r" and match.end() == len(buffer)):
                break
            yield buffer[start : match.start()]
            start = pos = match.end()
        buffer = buffer[start:]
    if buffer:
        yield buffer[:-1] if buffer.endswith("\r") else buffer


async def iter_sse_events(lines: AsyncIterator[str]) -> AsyncIterator[ServerSentEvent]:
    """
    Group decoded text lines into events.

    Lines starting with ``:`` are comments (DeepSeek sends ``: keep-alive``
    while the model is busy). Consecutive ``data:`` lines are joined with a
    newline and a blank line dispatches the event, unless its data is empty.
    A final event without its terminating blank line is still dispatched
    when the input ends.
    """
    event_type: Optional[str] = None
    data_lines: List[str] = []
    last_id: Optional[str] = None
    retry: Optional[int] = None

    async for line in lines:
        if not line:
            data = "\n".join(data_lines)
            if data:
                yield ServerSentEvent(
                    event=event_type or "message",
                    data=data,
                    id=last_id,
                    retry=retry,
                )
            event_type, data_lines, retry = None, [], None
            continue

        if line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "data":
            data_lines.append(value)
        elif field == "event":
            event_type = value
        elif field == "id":
            if "\0" not in value:
                last_id = value
        elif field == "retry":
            if value.isdigit():
                retry = int(value)

    data = "\n".join(data_lines)
    if data:
        yield ServerSentEvent(event=event_type or "message", data=data, id=last_id, retry=retry)


async def decode_chunks(events: AsyncIterator[ServerSentEvent]) -> AsyncIterator[ChunkResult]:
    """
    Turn SSE events into completion chunks.

    ``[DONE]`` ends the sequence without producing an item. A payload that
    does not parse is yielded as a DeserializationError and decoding goes
    on with the next event. A read failure is yielded as a TransportError
    and ends the sequence, since nothing more can be read.
    """
    try:
        async for event in events:
            if event.data == DONE_SENTINEL:
                logger.debug("Stream terminated by [DONE]")
                return

            try:
                chunk = ChatCompletionChunk.model_validate_json(event.data)
            except ValidationError as e:
                logger.warning(f"Skipping malformed stream event: {event.data[:80]!r}")
                error = DeserializationError(f"Invalid chunk payload: {e}", payload=event.data)
                error.__cause__ = e
                yield error
                continue

            yield chunk
    except httpx.RequestError as e:
        logger.warning(f"Stream interrupted: {e!r}")
        error = TransportError(f"Reading the event stream failed: {e}")
        error.__cause__ = e
        yield error
