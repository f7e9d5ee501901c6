"""
Exceptions raised (or yielded, inside a chunk stream) by the DeepSeek client
"""

from typing import Optional


class DeepSeekError(Exception):
    """Base class for every error surfaced by ds_api"""


class ConfigurationError(DeepSeekError):
    """Raised when required client settings are missing"""


class TransportError(DeepSeekError):
    """Connection or I/O failure in the HTTP layer"""


class HttpStatusError(DeepSeekError):
    """Exception raised when the API answers with a non-2xx status"""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP error {status_code}: {body}")


class DeserializationError(DeepSeekError):
    """A response body or event payload does not match the expected schema"""

    def __init__(self, message: str, payload: Optional[str] = None):
        self.payload = payload
        super().__init__(message)


class ContentParseError(DeepSeekError):
    """JSON-mode content returned by the model is not valid JSON"""

    def __init__(self, content: str, reason: str):
        self.content = content
        super().__init__(f"Assistant content is not valid JSON: {reason}")
