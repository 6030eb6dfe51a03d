"""Bounded per-contact conversation memory."""

from __future__ import annotations

from collections import deque

from meeting_setter.config import MAX_HISTORY_LIMIT
from meeting_setter.schemas import ConversationTurn, Role

DEFAULT_HISTORY_LIMIT = 10


class ConversationStore:
    """Ordered turns per contact, oldest first, capped at ``limit`` (FIFO)."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if not 1 <= limit <= MAX_HISTORY_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_HISTORY_LIMIT}")
        self.limit = limit
        self._histories: dict[str, deque[ConversationTurn]] = {}

    def append(self, contact_id: str, turn: ConversationTurn) -> None:
        history = self._histories.get(contact_id)
        if history is None:
            history = self._histories[contact_id] = deque(maxlen=self.limit)
        history.append(turn)

    def get(self, contact_id: str) -> list[ConversationTurn]:
        return list(self._histories.get(contact_id, ()))

    def first_user_utterance(self, contact_id: str) -> str | None:
        """Content of the earliest retained USER turn.

        Stands in for the contact's name when nothing better is known.
        """
        for turn in self._histories.get(contact_id, ()):
            if turn.role == Role.USER:
                return turn.content
        return None

    def as_messages(self, contact_id: str) -> list[dict]:
        return [t.as_message() for t in self.get(contact_id)]

    def contacts(self) -> list[str]:
        return list(self._histories)
