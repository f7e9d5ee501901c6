"""
Conversation wrappers: send text, get the assistant's text (or JSON) back
"""

import json
import logging
from typing import Any, List, Optional

import httpx

from .exceptions import ContentParseError
from .history import History, ListHistory
from .message_utils import system, user
from .models import Message, Model
from .request import Request
from .responses import ChatCompletionResponse

logger = logging.getLogger(__name__)


class NormalChatter:
    """
    Chat client working on a history owned by the caller.

    Each call appends the user message, sends the whole history, then appends
    the assistant's reply. Passing the history in on every call leaves the
    retention policy to the caller (see ``LimitedHistory``).
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        model: Model = Model.DEEPSEEK_CHAT,
    ):
        self.token = token
        self.base_url = base_url
        self.client = client
        self.model = model

    async def _turn(self, text: str, history: History, json_mode: bool) -> ChatCompletionResponse:
        history.add_message(user(text))

        request = Request.builder().messages(history.get_history()).model(self.model)
        if json_mode:
            request = request.json()

        response = await request.execute_nostreaming(self.token, base_url=self.base_url, client=self.client)

        # Reasoning text is output-only; the API rejects it in later requests
        reply = response.message().model_copy(update={"reasoning_content": None})
        history.add_message(reply)
        logger.info(f"Chat turn completed ({response.usage.total_tokens} tokens)")
        return response

    async def chat(self, text: str, history: History) -> str:
        response = await self._turn(text, history, json_mode=False)
        return response.content()

    async def chat_json(self, text: str, history: History) -> Any:
        """
        Like chat, with JSON output mode on; returns the decoded value.

        The prompt itself should ask for JSON, as the API requires. Raises
        ContentParseError if the reply does not decode (the reply is still
        recorded in the history).
        """
        response = await self._turn(text, history, json_mode=True)
        content = response.content()
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ContentParseError(content, str(e)) from e


class SimpleChatter:
    """Chat client keeping its own unbounded history, seeded with a system prompt"""

    def __init__(
        self,
        token: str,
        system_prompt: str,
        *,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        model: Model = Model.DEEPSEEK_CHAT,
    ):
        self._history = ListHistory([system(system_prompt)])
        self.chatter = NormalChatter(token, base_url=base_url, client=client, model=model)

    @property
    def system_prompt(self) -> str:
        return self._history.messages[0].content or ""

    @system_prompt.setter
    def system_prompt(self, prompt: str) -> None:
        self._history.messages[0] = system(prompt)

    @property
    def history(self) -> List[Message]:
        return self._history.get_history()

    async def chat(self, text: str) -> str:
        return await self.chatter.chat(text, self._history)

    async def chat_json(self, text: str) -> Any:
        return await self.chatter.chat_json(text, self._history)
