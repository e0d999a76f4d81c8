"""Bounded in-memory conversation history, keyed by chat id."""

from .config import config
from .models import ChatMessage


class ConversationHistoryStore:
    """Keeps the most recent messages of each conversation.

    Each conversation holds at most ``max_messages`` entries; older entries
    are dropped first. Nothing is persisted, history is lost on restart.
    """

    def __init__(self, max_messages: int | None = None) -> None:
        """Initialize the store.

        Args:
            max_messages: Per-conversation cap. If None, uses
                config.MAX_HISTORY_MESSAGES.

        Raises:
            ValueError: If the cap is negative.
        """
        if max_messages is None:
            max_messages = config.MAX_HISTORY_MESSAGES
        if max_messages < 0:
            msg = f"max_messages must be non-negative, got {max_messages}"
            raise ValueError(msg)
        self.max_messages = max_messages
        self._histories: dict[int, list[ChatMessage]] = {}

    def get(self, chat_id: int) -> list[ChatMessage]:
        """Return a copy of a conversation's history, oldest first."""  # noqa: DOC201
        return list(self._histories.get(chat_id, []))

    def append(self, chat_id: int, *messages: ChatMessage) -> None:
        """Append messages and trim the conversation to the cap."""
        history = self._histories.setdefault(chat_id, [])
        history.extend(messages)
        if len(history) > self.max_messages:
            del history[: len(history) - self.max_messages]

    def record_turn(self, chat_id: int, question: str, answer: str) -> None:
        """Record a user question and the assistant's answer."""
        self.append(
            chat_id,
            ChatMessage(role="user", content=question),
            ChatMessage(role="assistant", content=answer),
        )
