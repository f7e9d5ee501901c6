"""
Conversation history: the capability consumed by the chat wrappers and two adapters
"""

import logging
from typing import Iterable, List, Optional, Protocol, runtime_checkable

from .models import Message, Role

logger = logging.getLogger(__name__)


@runtime_checkable
class History(Protocol):
    """
    Anything that can record messages in order and hand back a copy of them.

    ``get_history`` must return an independent list: the caller sends it as
    the request body and must not alias the owner's storage.
    """

    def add_message(self, message: Message) -> None:
        ...

    def get_history(self) -> List[Message]:
        ...


class ListHistory:
    """Unbounded, list-backed history"""

    def __init__(self, messages: Optional[Iterable[Message]] = None):
        self.messages: List[Message] = list(messages or [])

    def add_message(self, message: Message) -> None:
        self.messages.append(message)

    def get_history(self) -> List[Message]:
        return [m.model_copy(deep=True) for m in self.messages]

    def __len__(self) -> int:
        return len(self.messages)


def as_history(messages: List[Message]) -> ListHistory:
    """Adapt a plain list; appends go to the same list object"""
    history = ListHistory()
    history.messages = messages
    return history


class LimitedHistory(ListHistory):
    """
    List-backed history keeping at most ``max_messages`` messages.

    Appending past the cap drops the oldest message. With ``pin_system``
    (the default) a system message at position 0 is never dropped, the
    oldest message after it goes instead. ``pin_system=False`` always drops
    position 0.
    """

    def __init__(
        self,
        messages: Optional[Iterable[Message]] = None,
        max_messages: int = 20,
        pin_system: bool = True,
    ):
        if max_messages < 1:
            raise ValueError("max_messages must be at least 1")
        if pin_system and max_messages < 2:
            raise ValueError("max_messages must leave room after the pinned system prompt")
        super().__init__(messages)
        self.max_messages = max_messages
        self.pin_system = pin_system
        self._trim()

    def _trim(self) -> None:
        while len(self.messages) > self.max_messages:
            pinned = self.pin_system and self.messages[0].role == Role.SYSTEM
            dropped = self.messages.pop(1 if pinned else 0)
            logger.debug(f"History over {self.max_messages} messages, dropped a {dropped.role.value} message")

    def add_message(self, message: Message) -> None:
        super().add_message(message)
        self._trim()
