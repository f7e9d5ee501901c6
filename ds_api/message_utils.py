"""
Helper functions for building messages and assembling streamed replies
"""

from typing import AsyncIterator, Dict, Iterable, List, Optional

from .exceptions import DeepSeekError
from .models import FunctionCall, Message, Role, ToolCall, ToolType
from .responses import ChatCompletionChunk
from .streaming import ChunkResult


def system(content: str) -> Message:
    return Message(role=Role.SYSTEM, content=content)


def user(content: str, name: Optional[str] = None) -> Message:
    return Message(role=Role.USER, content=content, name=name)


def assistant(content: str, prefix: Optional[bool] = None) -> Message:
    """Assistant message; with prefix=True the model continues from content"""
    return Message(role=Role.ASSISTANT, content=content, prefix=prefix)


def tool_result(tool_call_id: str, content: str) -> Message:
    """Output of a tool call, fed back to the model"""
    return Message(role=Role.TOOL, tool_call_id=tool_call_id, content=content)


def accumulate_chunks(chunks: Iterable[ChatCompletionChunk], choice_index: int = 0) -> Message:
    """
    Merge the deltas of one choice into the complete assistant message.

    Content and reasoning fragments are concatenated in order. Tool-call
    fragments are grouped by their ``index``: the first fragment carries the
    id and function name, later ones append to the arguments string.
    """
    content: List[str] = []
    reasoning: List[str] = []
    calls: Dict[int, Dict[str, str]] = {}

    for chunk in chunks:
        for choice in chunk.choices:
            if choice.index != choice_index:
                continue
            delta = choice.delta
            if delta.content:
                content.append(delta.content)
            if delta.reasoning_content:
                reasoning.append(delta.reasoning_content)
            for fragment in delta.tool_calls or []:
                call = calls.setdefault(fragment.index, {"id": "", "name": "", "arguments": ""})
                if fragment.id:
                    call["id"] = fragment.id
                if fragment.function is not None:
                    if fragment.function.name:
                        call["name"] += fragment.function.name
                    if fragment.function.arguments:
                        call["arguments"] += fragment.function.arguments

    tool_calls = [
        ToolCall(
            id=call["id"],
            type=ToolType.FUNCTION,
            function=FunctionCall(name=call["name"], arguments=call["arguments"]),
        )
        for _, call in sorted(calls.items())
    ]
    return Message(
        role=Role.ASSISTANT,
        content="".join(content) if content or not tool_calls else None,
        reasoning_content="".join(reasoning) or None,
        tool_calls=tool_calls or None,
    )


async def collect_message(stream: AsyncIterator[ChunkResult], skip_errors: bool = False) -> Message:
    """
    Drain a chunk stream into one assistant message.

    The first error item is raised unless skip_errors is set, in which case
    malformed events are ignored. The stream is closed either way.
    """
    chunks: List[ChatCompletionChunk] = []
    try:
        async for item in stream:
            if isinstance(item, DeepSeekError):
                if skip_errors:
                    continue
                raise item
            chunks.append(item)
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()
    return accumulate_chunks(chunks)
