"""Data models for the DocBot application."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Literal

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class DocChunk:
    """A labeled section extracted from the documentation blob."""

    header: str
    source_url: str
    body: str

    def to_search_text(self) -> str:
        """Render the chunk the way it is indexed and placed into prompts.

        Returns:
            The chunk formatted as ``Section: <header>`` followed by its body.
        """
        return f"Section: {self.header}\n{self.body}"


@dataclass(frozen=True)
class KnowledgeItem:
    """A curated question/answer pair from the knowledge base file."""

    question: str
    answer: str
    last_referenced_date: str

    @classmethod
    def from_dict(cls, data: object) -> KnowledgeItem | None:
        """Build an item from a decoded JSON object.

        Returns:
            The item, or None when any field is missing or not a string.
        """
        if not isinstance(data, dict):
            return None
        fields = ("question", "answer", "last_referenced_date")
        values = [data.get(field) for field in fields]
        if not all(isinstance(value, str) for value in values):
            return None
        question, answer, last_referenced_date = values
        return cls(
            question=question,
            answer=answer,
            last_referenced_date=last_referenced_date,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "question": self.question,
            "answer": self.answer,
            "last_referenced_date": self.last_referenced_date,
        }

    def to_prompt_text(self) -> str:
        return f"Q: {self.question}\nA: {self.answer}"


@dataclass(frozen=True)
class ChatMessage:
    """A role-tagged message in a completion request or conversation log."""

    role: Role
    content: str

    def to_param(self) -> dict[str, str]:
        """Convert to the dict shape expected by the chat completions API."""  # noqa: DOC201
        return {"role": self.role, "content": self.content}


class RequestType(StrEnum):
    """Routing categories produced by the query classifier.

    ``UNCLASSIFIED`` is never emitted by the model; it marks a classification
    that failed and is routed the same way as a documentation query.
    """

    DOCUMENTATION_QUERY = "documentation_query"
    BOT_RELATED_INQUIRY = "bot_related_inquiry"
    BROKER_ID_SETUP_INQUIRY = "broker_id_setup_inquiry"
    UNRELATED_QUERY = "unrelated_query"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class IncomingMessage:
    """The subset of a Telegram message the pipeline needs."""

    message_id: int
    chat_id: int
    text: str | None
    reply_to_user_id: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IncomingMessage:
        """Parse a Telegram ``Message`` object.

        Returns:
            The parsed message.
        """
        reply_to = data.get("reply_to_message") or {}
        reply_author = reply_to.get("from") or {}
        return cls(
            message_id=int(data["message_id"]),
            chat_id=int(data["chat"]["id"]),
            text=data.get("text"),
            reply_to_user_id=reply_author.get("id"),
        )


@dataclass(frozen=True)
class Update:
    """A single Telegram update as returned by ``getUpdates``."""

    update_id: int
    message: IncomingMessage | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Update:
        """Parse a Telegram ``Update`` object.

        Returns:
            The parsed update; ``message`` is None for non-message updates.
        """
        message_data = data.get("message")
        return cls(
            update_id=int(data["update_id"]),
            message=IncomingMessage.from_dict(message_data) if message_data else None,
        )
