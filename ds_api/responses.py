"""
Response-side data models: single-shot completions and streamed chunks
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .models import Message, Role, ToolType


class FinishReason(str, Enum):
    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    TOOL_CALLS = "tool_calls"
    INSUFFICIENT_SYSTEM_RESOURCE = "insufficient_system_resource"


class TopLogprob(BaseModel):
    token: str
    logprob: float
    bytes: Optional[List[int]] = None


class TokenLogprob(BaseModel):
    """Log-probability of one output token and its top alternatives"""
    token: str
    logprob: float
    bytes: Optional[List[int]] = None
    top_logprobs: List[TopLogprob]


class Logprobs(BaseModel):
    content: Optional[List[TokenLogprob]] = None
    reasoning_content: Optional[List[TokenLogprob]] = None


class CompletionTokensDetails(BaseModel):
    reasoning_tokens: int


class Usage(BaseModel):
    """Token accounting for one request"""
    completion_tokens: int
    prompt_tokens: int
    total_tokens: int
    prompt_cache_hit_tokens: Optional[int] = None
    prompt_cache_miss_tokens: Optional[int] = None
    completion_tokens_details: Optional[CompletionTokensDetails] = None


class Choice(BaseModel):
    index: int
    message: Message
    finish_reason: FinishReason
    logprobs: Optional[Logprobs] = None


class ChatCompletionResponse(BaseModel):
    """Body of a successful non-streaming completion"""
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    system_fingerprint: Optional[str] = None
    choices: List[Choice] = Field(min_length=1)
    usage: Usage

    def message(self) -> Message:
        """Assistant message of the first choice"""
        return self.choices[0].message

    def content(self) -> str:
        """Text content of the first choice, empty when the model sent none"""
        return self.message().content or ""

    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.created, tz=timezone.utc)


class DeltaFunctionCall(BaseModel):
    name: Optional[str] = None
    arguments: Optional[str] = None


class DeltaToolCall(BaseModel):
    """Fragment of a tool call, addressed by its position in the final list"""
    index: int
    id: Optional[str] = None
    type: Optional[ToolType] = None
    function: Optional[DeltaFunctionCall] = None


class Delta(BaseModel):
    """Incremental piece of the assistant message being generated"""
    content: Optional[str] = None
    reasoning_content: Optional[str] = None
    role: Optional[Role] = None
    tool_calls: Optional[List[DeltaToolCall]] = None


class ChunkChoice(BaseModel):
    index: int
    delta: Delta
    finish_reason: Optional[FinishReason] = None
    logprobs: Optional[Logprobs] = None


class ChatCompletionChunk(BaseModel):
    """
    One streamed event payload.

    The last chunk of a stream opened with ``include_usage`` carries
    ``usage`` and an empty (or null) ``choices`` list.
    """
    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int
    model: str
    system_fingerprint: Optional[str] = None
    choices: List[ChunkChoice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    @field_validator("choices", mode="before")
    @classmethod
    def _null_choices(cls, value):
        return [] if value is None else value

    def content(self) -> str:
        """Content fragment of the first choice, empty when absent"""
        if not self.choices:
            return ""
        return self.choices[0].delta.content or ""
