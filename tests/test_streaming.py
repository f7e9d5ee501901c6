"""SSE decoding and the streaming execution path."""

import json

import httpx
import pytest

from ds_api import Request, api, execute_streaming
from ds_api.exceptions import DeepSeekError, DeserializationError, HttpStatusError, TransportError
from ds_api.message_utils import collect_message, user
from ds_api.responses import ChatCompletionChunk
from ds_api.streaming import decode_chunks, iter_lines, iter_sse_events
from tests.conftest import chunk_json, event
from tests.fake_server import BASE_URL, create_app, make_client, recorded

TOKEN = "sk-test"


async def _lines(*lines):
    for line in lines:
        yield line


async def _collect(items):
    return [item async for item in items]


# =============================================================================
# Event framing
# =============================================================================


@pytest.mark.asyncio
async def test_lines_split_on_any_line_ending_across_chunks():
    lines = await _collect(iter_lines(_lines("a\r", "\nb\rc\n", "\nd")))

    assert lines == ["a", "b", "c", "", "d"]


@pytest.mark.asyncio
async def test_lines_keep_unicode_separators_inside_payload():
    lines = await _collect(iter_lines(_lines('data: {"content":"x\u2028y"}\n\n')))

    assert lines == ['data: {"content":"x\u2028y"}', ""]


@pytest.mark.asyncio
async def test_long_line_arriving_in_tiny_pieces():
    payload = "x" * 5000
    pieces = list(payload) + ["\r", "\n", "y", "\r"]

    lines = await _collect(iter_lines(_lines(*pieces)))

    assert lines == [payload, "y"]


@pytest.mark.asyncio
async def test_events_split_on_blank_lines():
    events = await _collect(iter_sse_events(_lines("data: one", "", "data: two", "")))

    assert [e.data for e in events] == ["one", "two"]
    assert events[0].event == "message"


@pytest.mark.asyncio
async def test_multiline_data_and_fields():
    events = await _collect(
        iter_sse_events(_lines("event: update", "id: 7", "retry: 3000", "data: a", "data:b", ""))
    )

    assert len(events) == 1
    assert events[0].event == "update"
    assert events[0].id == "7"
    assert events[0].retry == 3000
    assert events[0].data == "a\nb"


@pytest.mark.asyncio
async def test_comments_and_empty_events_are_skipped():
    events = await _collect(iter_sse_events(_lines(": keep-alive", "", "", "data: x", "")))

    assert [e.data for e in events] == ["x"]


@pytest.mark.asyncio
async def test_trailing_event_without_blank_line_is_dispatched():
    events = await _collect(iter_sse_events(_lines("data: [DONE]")))

    assert [e.data for e in events] == ["[DONE]"]


@pytest.mark.asyncio
async def test_event_with_empty_data_is_not_dispatched():
    events = await _collect(iter_sse_events(_lines("data", "", "data:", "", "data: [DONE]", "")))

    assert [e.data for e in events] == ["[DONE]"]


@pytest.mark.asyncio
async def test_blank_data_lines_do_not_become_error_items():
    items = await _collect(decode_chunks(iter_sse_events(_lines("data", "", "data: [DONE]", ""))))

    assert items == []


@pytest.mark.asyncio
async def test_two_empty_data_lines_still_dispatch_a_newline():
    events = await _collect(iter_sse_events(_lines("data", "data", "")))

    assert [e.data for e in events] == ["\n"]


# =============================================================================
# Chunk decoding
# =============================================================================


@pytest.mark.asyncio
async def test_two_chunks_then_done():
    lines = _lines(f"data: {chunk_json('Hel')}", "", f"data: {chunk_json('lo')}", "", "data: [DONE]", "")
    items = await _collect(decode_chunks(iter_sse_events(lines)))

    assert len(items) == 2
    assert all(isinstance(item, ChatCompletionChunk) for item in items)
    assert "".join(item.content() for item in items) == "Hello"


@pytest.mark.asyncio
async def test_nothing_is_read_after_done():
    items = await _collect(
        decode_chunks(iter_sse_events(_lines("data: [DONE]", "", f"data: {chunk_json('late')}", "")))
    )

    assert items == []


@pytest.mark.asyncio
async def test_malformed_event_is_yielded_and_decoding_continues():
    items = await _collect(
        decode_chunks(
            iter_sse_events(
                _lines(f"data: {chunk_json('a')}", "", "data: {not json", "", f"data: {chunk_json('b')}", "")
            )
        )
    )

    assert isinstance(items[0], ChatCompletionChunk)
    assert isinstance(items[1], DeserializationError)
    assert items[1].payload == "{not json"
    assert isinstance(items[2], ChatCompletionChunk)
    assert items[2].content() == "b"


# =============================================================================
# Execution over HTTP
# =============================================================================


@pytest.mark.asyncio
async def test_stream_yields_two_chunks_and_stops_at_sentinel(scripted):
    transport = scripted(pieces=[event(chunk_json("Hel")), event(chunk_json("lo")), event("[DONE]")])

    async with transport.client() as client:
        stream = await execute_streaming(Request.basic_query([user("hi")]), TOKEN, base_url=BASE_URL, client=client)
        items = await _collect(stream)

    assert [item.content() for item in items] == ["Hel", "lo"]
    assert stream.closed
    assert transport.stream.closed


@pytest.mark.asyncio
async def test_stream_request_forces_stream_flag_and_bearer_auth(scripted):
    transport = scripted(pieces=[event("[DONE]")])

    async with transport.client() as client:
        async with await Request.basic_query([user("hi")]).execute_streaming(
            TOKEN, base_url=BASE_URL, client=client
        ) as stream:
            await _collect(stream)

    sent = transport.requests[0]
    assert str(sent.url) == f"{BASE_URL}/chat/completions"
    assert sent.headers["authorization"] == f"Bearer {TOKEN}"
    assert json.loads(sent.content)["stream"] is True


@pytest.mark.asyncio
async def test_stream_keeps_pulling_after_malformed_event(scripted):
    transport = scripted(
        pieces=[event(chunk_json("a")), event("{broken"), event(chunk_json("c")), event("[DONE]")]
    )

    async with transport.client() as client:
        stream = await execute_streaming(Request.builder(), TOKEN, base_url=BASE_URL, client=client)
        first = await stream.__anext__()
        second = await stream.__anext__()
        pulled_before = transport.stream.pulled
        third = await stream.__anext__()
        await stream.aclose()

    assert isinstance(first, ChatCompletionChunk)
    assert isinstance(second, DeserializationError)
    assert isinstance(third, ChatCompletionChunk)
    assert transport.stream.pulled > pulled_before


@pytest.mark.asyncio
async def test_read_failure_is_yielded_then_stream_ends(scripted):
    transport = scripted(pieces=[event(chunk_json("a")), httpx.ReadError("connection reset")])

    async with transport.client() as client:
        stream = await execute_streaming(Request.builder(), TOKEN, base_url=BASE_URL, client=client)
        items = await _collect(stream)

    assert isinstance(items[0], ChatCompletionChunk)
    assert isinstance(items[1], TransportError)
    assert isinstance(items[1].__cause__, httpx.ReadError)
    assert len(items) == 2


@pytest.mark.asyncio
async def test_http_error_raises_before_iteration(scripted):
    transport = scripted(status_code=401, pieces=[b'{"error":{"message":"Authentication Fails"}}'])

    async with transport.client() as client:
        with pytest.raises(HttpStatusError) as excinfo:
            await execute_streaming(Request.builder(), TOKEN, base_url=BASE_URL, client=client)

    assert excinfo.value.status_code == 401
    assert "Authentication Fails" in excinfo.value.body
    assert transport.stream.closed


@pytest.mark.asyncio
async def test_connect_failure_raises_transport_error(scripted):
    transport = scripted()
    transport.error = httpx.ConnectError("no route to host")

    async with transport.client() as client:
        with pytest.raises(TransportError):
            await execute_streaming(Request.builder(), TOKEN, base_url=BASE_URL, client=client)


@pytest.mark.asyncio
async def test_abandoning_stream_closes_connection_quietly(scripted):
    transport = scripted(
        pieces=[event(chunk_json("a")), event(chunk_json("b")), event(chunk_json("c")), event("[DONE]")]
    )

    async with transport.client() as client:
        async with await execute_streaming(Request.builder(), TOKEN, base_url=BASE_URL, client=client) as stream:
            async for item in stream:
                assert item.content() == "a"
                break

    assert stream.closed
    assert transport.stream.closed
    assert [item async for item in stream] == []


@pytest.mark.asyncio
async def test_temporary_client_stays_open_until_stream_is_closed(monkeypatch, scripted):
    transport = scripted(pieces=[event(chunk_json("a")), event(chunk_json("b")), event("[DONE]")])
    owned = transport.client()
    monkeypatch.setattr(api, "_new_client", lambda: owned)

    stream = await execute_streaming(Request.builder(), TOKEN, base_url=BASE_URL)
    async for item in stream:
        break

    assert not stream.closed
    assert not owned.is_closed

    await stream.aclose()

    assert owned.is_closed
    assert transport.stream.closed


@pytest.mark.asyncio
async def test_stream_against_fake_api():
    app = create_app(reply="The capital of France is Paris.")

    async with make_client(app) as client:
        stream = await Request.basic_query([user("Capital of France?")]).execute_streaming(
            TOKEN, base_url=BASE_URL, client=client
        )
        message = await collect_message(stream)

    assert message.content.strip() == "The capital of France is Paris."
    assert stream.closed
    assert recorded(app)[0]["body"]["stream"] is True


@pytest.mark.asyncio
async def test_collect_message_raises_first_error(scripted):
    transport = scripted(pieces=[event(chunk_json("a")), event("oops"), event("[DONE]")])

    async with transport.client() as client:
        stream = await execute_streaming(Request.builder(), TOKEN, base_url=BASE_URL, client=client)
        with pytest.raises(DeepSeekError):
            await collect_message(stream)

    assert stream.closed
