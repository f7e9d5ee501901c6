"""
Chainable builder for chat-completion requests
"""

import copy
from typing import List, Optional, Sequence, Union

import httpx

from . import api
from .models import (
    ChatCompletionRequest,
    Message,
    Model,
    ResponseFormat,
    ResponseFormatType,
    StreamOptions,
    Thinking,
    ThinkingType,
    Tool,
    ToolChoiceObject,
    ToolChoiceType,
)
from .responses import ChatCompletionResponse


class Request:
    """
    Immutable, ready-to-send request.

    Every configuration call returns a new ``Request``; the receiver is never
    modified, so a partially configured value can be shared and branched:

        base = Request.basic_query([user("Hi")]).temperature(0.2)
        creative = base.temperature(1.3)

    Values are validated as they are set (``pydantic.ValidationError`` on
    out-of-range numbers), but fields are not cross-checked against each other.
    """

    def __init__(self, raw: Optional[ChatCompletionRequest] = None):
        self._raw = raw if raw is not None else ChatCompletionRequest()

    @classmethod
    def builder(cls) -> "Request":
        """Empty request for the default chat model"""
        return cls()

    @classmethod
    def basic_query(cls, messages: Sequence[Message]) -> "Request":
        return cls.builder().messages(messages).model(Model.DEEPSEEK_CHAT)

    @classmethod
    def basic_query_reasoner(cls, messages: Sequence[Message]) -> "Request":
        return cls.builder().messages(messages).model(Model.DEEPSEEK_REASONER)

    @classmethod
    def from_raw_unchecked(cls, raw: ChatCompletionRequest) -> "Request":
        """
        Wrap an envelope built by hand.

        No builder-level guarantee applies (e.g. ``logprobs`` and
        ``top_logprobs`` may disagree); the caller owns its consistency.
        """
        return cls(raw)

    def _evolve(self, **fields) -> "Request":
        raw = self._raw.model_copy(deep=True)
        for name, value in fields.items():
            setattr(raw, name, copy.deepcopy(value))
        return Request(raw)

    def add_message(self, message: Message) -> "Request":
        return self._evolve(messages=[*self._raw.messages, message])

    def messages(self, messages: Sequence[Message]) -> "Request":
        return self._evolve(messages=list(messages))

    def model(self, model: Model) -> "Request":
        return self._evolve(model=model)

    def frequency_penalty(self, penalty: float) -> "Request":
        """Between -2.0 and 2.0; positive values penalise tokens by how often they already appeared"""
        return self._evolve(frequency_penalty=penalty)

    def presence_penalty(self, penalty: float) -> "Request":
        """Between -2.0 and 2.0; positive values penalise tokens that already appeared at all"""
        return self._evolve(presence_penalty=penalty)

    def max_tokens(self, max_tokens: int) -> "Request":
        return self._evolve(max_tokens=max_tokens)

    def temperature(self, temperature: float) -> "Request":
        """Sampling temperature between 0 and 2; tune this or top_p, not both"""
        return self._evolve(temperature=temperature)

    def top_p(self, top_p: float) -> "Request":
        return self._evolve(top_p=top_p)

    def stop(self, stop: Union[str, Sequence[str]]) -> "Request":
        """Stop on a single sequence or on any of a list of sequences"""
        value: Union[str, List[str]] = stop if isinstance(stop, str) else list(stop)
        return self._evolve(stop=value)

    def add_tool(self, tool: Tool) -> "Request":
        return self._evolve(tools=[*(self._raw.tools or []), tool])

    def tool_choice_type(self, tool_choice: ToolChoiceType) -> "Request":
        return self._evolve(tool_choice=tool_choice)

    def tool_choice_object(self, tool_choice: ToolChoiceObject) -> "Request":
        return self._evolve(tool_choice=tool_choice)

    def logprobs(self, top_logprobs: int) -> "Request":
        """Return log-probabilities for the top_logprobs (0-20) most likely tokens at each position"""
        return self._evolve(logprobs=True, top_logprobs=top_logprobs)

    def json(self) -> "Request":
        """Ask for a JSON object as the assistant content"""
        return self._evolve(response_format=ResponseFormat(type=ResponseFormatType.JSON_OBJECT))

    def thinking(self, enabled: bool = True) -> "Request":
        kind = ThinkingType.ENABLED if enabled else ThinkingType.DISABLED
        return self._evolve(thinking=Thinking(type=kind))

    def include_usage(self, include: bool = True) -> "Request":
        """Request a trailing usage chunk when streaming"""
        return self._evolve(stream_options=StreamOptions(include_usage=include))

    @property
    def raw(self) -> ChatCompletionRequest:
        """Snapshot copy of the underlying envelope"""
        return self._raw.model_copy(deep=True)

    def raw_mut(self) -> ChatCompletionRequest:
        """
        Direct mutable access to the underlying envelope.

        Changes made through it bypass every builder guarantee, including the
        immutability of this value.
        """
        return self._raw

    async def execute_nostreaming(
        self,
        token: str,
        *,
        base_url: Optional[str] = None,
        url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> ChatCompletionResponse:
        return await api.execute_nostreaming(self, token, base_url=base_url, url=url, client=client)

    async def execute_streaming(
        self,
        token: str,
        *,
        base_url: Optional[str] = None,
        url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "api.ChunkStream":
        return await api.execute_streaming(self, token, base_url=base_url, url=url, client=client)

    def __repr__(self) -> str:
        return f"Request({self._raw.to_payload()!r})"
