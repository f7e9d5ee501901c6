"""
ds_api: typed asyncio client for the DeepSeek chat-completion API

Single-shot and streamed completions, a chainable request builder and
history-backed chat wrappers.
"""

__version__ = "0.1.0"

from .api import ChunkStream, execute_nostreaming, execute_streaming
from .chatter import NormalChatter, SimpleChatter
from .exceptions import (
    ConfigurationError,
    ContentParseError,
    DeepSeekError,
    DeserializationError,
    HttpStatusError,
    TransportError,
)
from .history import History, LimitedHistory, ListHistory, as_history
from .message_utils import accumulate_chunks, assistant, collect_message, system, tool_result, user
from .models import (
    ChatCompletionRequest,
    Function,
    FunctionCall,
    FunctionName,
    Message,
    Model,
    ResponseFormat,
    ResponseFormatType,
    Role,
    Stop,
    StreamOptions,
    Thinking,
    ThinkingType,
    Tool,
    ToolCall,
    ToolChoice,
    ToolChoiceObject,
    ToolChoiceType,
    ToolType,
)
from .request import Request
from .responses import (
    ChatCompletionChunk,
    ChatCompletionResponse,
    Choice,
    ChunkChoice,
    CompletionTokensDetails,
    Delta,
    DeltaFunctionCall,
    DeltaToolCall,
    FinishReason,
    Logprobs,
    TokenLogprob,
    TopLogprob,
    Usage,
)
from .streaming import DONE_SENTINEL, ChunkResult, ServerSentEvent
from .tools import function_tool, tool_choice_function

__all__ = [
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "Choice",
    "ChunkChoice",
    "ChunkResult",
    "ChunkStream",
    "CompletionTokensDetails",
    "ConfigurationError",
    "ContentParseError",
    "DONE_SENTINEL",
    "DeepSeekError",
    "Delta",
    "DeltaFunctionCall",
    "DeltaToolCall",
    "DeserializationError",
    "FinishReason",
    "Function",
    "FunctionCall",
    "FunctionName",
    "History",
    "HttpStatusError",
    "LimitedHistory",
    "ListHistory",
    "Logprobs",
    "Message",
    "Model",
    "NormalChatter",
    "Request",
    "ResponseFormat",
    "ResponseFormatType",
    "Role",
    "ServerSentEvent",
    "SimpleChatter",
    "Stop",
    "StreamOptions",
    "Thinking",
    "ThinkingType",
    "TokenLogprob",
    "Tool",
    "ToolCall",
    "ToolChoice",
    "ToolChoiceObject",
    "ToolChoiceType",
    "ToolType",
    "TopLogprob",
    "TransportError",
    "Usage",
    "accumulate_chunks",
    "as_history",
    "assistant",
    "collect_message",
    "execute_nostreaming",
    "execute_streaming",
    "function_tool",
    "system",
    "tool_choice_function",
    "tool_result",
    "user",
    "__version__",
]
