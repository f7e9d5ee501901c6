"""
Request-side data models for the DeepSeek chat-completion API
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Role(str, Enum):
    """Author of a message"""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Model(str, Enum):
    """Model variants served behind /chat/completions"""
    DEEPSEEK_CHAT = "deepseek-chat"
    DEEPSEEK_REASONER = "deepseek-reasoner"


class ToolType(str, Enum):
    FUNCTION = "function"


class FunctionCall(BaseModel):
    """Function invocation issued by the model"""
    name: str
    arguments: str  # JSON-encoded object, as produced by the model


class ToolCall(BaseModel):
    """Tool call attached to an assistant message"""
    id: str
    type: ToolType = ToolType.FUNCTION
    function: FunctionCall


class Message(BaseModel):
    """
    One turn of a conversation.

    A tool-role message answers a previous tool call and must carry its
    ``tool_call_id``. An assistant message that requests tool use carries
    ``tool_calls`` and may leave ``content`` unset.
    """
    role: Role = Role.USER
    content: Optional[str] = None
    name: Optional[str] = None
    tool_call_id: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    reasoning_content: Optional[str] = None
    prefix: Optional[bool] = None

    @model_validator(mode="after")
    def _check_role_fields(self) -> "Message":
        if self.role == Role.TOOL and not self.tool_call_id:
            raise ValueError("tool messages require a tool_call_id")
        # Assistant replies may legitimately be empty (e.g. reasoning only)
        if self.role != Role.ASSISTANT and self.content is None and not self.tool_calls:
            raise ValueError(f"{self.role.value} messages require content")
        return self


class Function(BaseModel):
    """Function definition offered to the model as a tool"""
    name: str
    description: Optional[str] = None
    parameters: Dict[str, Any]
    strict: Optional[bool] = None


class Tool(BaseModel):
    type: ToolType = ToolType.FUNCTION
    function: Function


class ToolChoiceType(str, Enum):
    NONE = "none"
    AUTO = "auto"
    REQUIRED = "required"


class FunctionName(BaseModel):
    name: str


class ToolChoiceObject(BaseModel):
    """Forces the model to call one named function"""
    type: ToolType = ToolType.FUNCTION
    function: FunctionName


# Both unions are untagged on the wire and resolved by JSON shape
ToolChoice = Union[ToolChoiceType, ToolChoiceObject]
Stop = Union[str, List[str]]


class ResponseFormatType(str, Enum):
    TEXT = "text"
    JSON_OBJECT = "json_object"


class ResponseFormat(BaseModel):
    type: ResponseFormatType = ResponseFormatType.TEXT


class ThinkingType(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class Thinking(BaseModel):
    """Reasoning switch, only honoured by the reasoner variant"""
    type: ThinkingType


class StreamOptions(BaseModel):
    include_usage: bool


class ChatCompletionRequest(BaseModel):
    """Request body for POST /chat/completions"""
    model_config = ConfigDict(validate_assignment=True)

    messages: List[Message] = Field(default_factory=list)
    model: Model = Model.DEEPSEEK_CHAT
    thinking: Optional[Thinking] = None
    frequency_penalty: Optional[float] = Field(default=None, ge=-2, le=2)
    max_tokens: Optional[int] = Field(default=None, ge=1)
    presence_penalty: Optional[float] = Field(default=None, ge=-2, le=2)
    response_format: Optional[ResponseFormat] = None
    stop: Optional[Stop] = None
    stream: Optional[bool] = None
    stream_options: Optional[StreamOptions] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    top_p: Optional[float] = Field(default=None, ge=0, le=1)
    tools: Optional[List[Tool]] = None
    tool_choice: Optional[ToolChoice] = None
    logprobs: Optional[bool] = None
    top_logprobs: Optional[int] = Field(default=None, ge=0, le=20)

    def to_payload(self) -> Dict[str, Any]:
        """Wire representation with every unset field omitted"""
        return self.model_dump(mode="json", exclude_none=True)
