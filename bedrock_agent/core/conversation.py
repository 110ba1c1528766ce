"""
Run-scoped, append-only conversation history.
"""

from __future__ import annotations

from typing import Iterator, Optional

from .models import Message


class Conversation:
    """Ordered message log owned by a single orchestration run."""

    def __init__(self, messages: Optional[list[Message]] = None):
        self._messages: list[Message] = list(messages or [])

    def append(self, message: Message) -> None:
        self._messages.append(message)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
