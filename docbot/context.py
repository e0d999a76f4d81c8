"""Context assembly: turns a classified request into an answering plan."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .config import config
from .models import ChatMessage, RequestType
from .prompts import (
    BOT_PERSONA_PROMPT,
    BROKER_ESCALATION_RESPONSE,
    CONTEXT_SEPARATOR,
    DOCUMENTATION_PROMPT_TEMPLATE,
    NO_DOC_MATCHES,
    NO_DOC_MATCHES_FALLBACK,
    NO_KNOWLEDGE_MATCHES,
    NO_KNOWLEDGE_MATCHES_FALLBACK,
    SEARCH_UNAVAILABLE_RESPONSE,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .pipeline import RetrievalPipeline

logger = config.get_logger(__name__)


@dataclass(frozen=True)
class ResponsePlan:
    """What the bot should do with a message.

    Exactly one of three things happens: ``messages`` is sent to the
    answering model, ``reply_text`` is sent as-is, or nothing is sent.
    """

    messages: tuple[ChatMessage, ...] | None = None
    reply_text: str | None = None
    format_reply: bool = False
    record_history: bool = False

    @classmethod
    def complete(cls, messages: Iterable[ChatMessage]) -> ResponsePlan:
        return cls(messages=tuple(messages), record_history=True)

    @classmethod
    def canned(cls, text: str) -> ResponsePlan:
        """A fixed reply that is formatted for chat and kept in history."""  # noqa: DOC201
        return cls(reply_text=text, format_reply=True, record_history=True)

    @classmethod
    def notice(cls, text: str) -> ResponsePlan:
        """A plain-text service notice that is not kept in history."""  # noqa: DOC201
        return cls(reply_text=text)

    @classmethod
    def silent(cls) -> ResponsePlan:
        return cls()

    @property
    def requires_completion(self) -> bool:
        return self.messages is not None

    @property
    def is_silent(self) -> bool:
        return self.messages is None and self.reply_text is None


def pack_context(texts: Iterable[str], budget: int, separator: str) -> str:
    """Join rank-ordered texts without exceeding a character budget.

    Texts are never truncated. The first text that would overflow the
    budget ends the walk, since later candidates rank no better.

    Returns:
        The joined texts, possibly empty.
    """
    packed = ""
    for text in texts:
        extra = len(separator) if packed else 0
        if len(packed) + extra + len(text) > budget:
            break
        packed = f"{packed}{separator}{text}" if packed else text
    return packed


class ContextAssembler:
    """Builds the answering prompt for each request type."""

    def __init__(  # noqa: PLR0913
        self,
        pipeline: RetrievalPipeline,
        *,
        max_doc_results: int | None = None,
        max_doc_characters: int | None = None,
        max_knowledge_results: int | None = None,
        max_knowledge_characters: int | None = None,
        separator: str = CONTEXT_SEPARATOR,
    ) -> None:
        """Initialize the ContextAssembler.

        Args:
            pipeline: Source of documentation and knowledge base matches.
            max_doc_results: Documentation candidates considered. If None,
                uses config.MAX_DOC_RESULTS.
            max_doc_characters: Documentation context budget. If None, uses
                config.MAX_DOC_CONTEXT_CHARACTERS.
            max_knowledge_results: Knowledge candidates considered. If None,
                uses config.MAX_KNOWLEDGE_RESULTS.
            max_knowledge_characters: Knowledge context budget. If None, uses
                config.MAX_KB_CONTEXT_CHARACTERS.
            separator: Placed between packed candidates.
        """
        self.pipeline = pipeline
        self.max_doc_results = (
            config.MAX_DOC_RESULTS if max_doc_results is None else max_doc_results
        )
        self.max_doc_characters = (
            config.MAX_DOC_CONTEXT_CHARACTERS
            if max_doc_characters is None
            else max_doc_characters
        )
        self.max_knowledge_results = (
            config.MAX_KNOWLEDGE_RESULTS
            if max_knowledge_results is None
            else max_knowledge_results
        )
        self.max_knowledge_characters = (
            config.MAX_KB_CONTEXT_CHARACTERS
            if max_knowledge_characters is None
            else max_knowledge_characters
        )
        self.separator = separator

    def build_doc_context(self, question: str, *, fallback: bool = False) -> str:
        matches = self.pipeline.search_docs(question, limit=self.max_doc_results)
        context = pack_context(
            (chunk.to_search_text() for chunk, _ in matches),
            self.max_doc_characters,
            self.separator,
        )
        logger.info(
            "Doc context: %d matches, %d characters", len(matches), len(context)
        )
        if context:
            return context
        return NO_DOC_MATCHES_FALLBACK if fallback else NO_DOC_MATCHES

    def build_knowledge_context(self, question: str, *, fallback: bool = False) -> str:
        matches = self.pipeline.search_knowledge(
            question, limit=self.max_knowledge_results
        )
        context = pack_context(
            (item.to_prompt_text() for item, _ in matches),
            self.max_knowledge_characters,
            self.separator,
        )
        logger.info(
            "Knowledge context: %d matches, %d characters",
            len(matches),
            len(context),
        )
        if context:
            return context
        return NO_KNOWLEDGE_MATCHES_FALLBACK if fallback else NO_KNOWLEDGE_MATCHES

    def build_documentation_prompt(
        self, question: str, *, fallback: bool = False
    ) -> str:
        return DOCUMENTATION_PROMPT_TEMPLATE.format(
            doc_context=self.build_doc_context(question, fallback=fallback),
            knowledge_context=self.build_knowledge_context(question, fallback=fallback),
        )

    @staticmethod
    def _conversation(
        system_prompt: str, question: str, history: Sequence[ChatMessage]
    ) -> list[ChatMessage]:
        return [
            ChatMessage(role="system", content=system_prompt),
            *history,
            ChatMessage(role="user", content=question),
        ]

    def plan(
        self,
        request_type: RequestType,
        question: str,
        history: Sequence[ChatMessage] = (),
    ) -> ResponsePlan:
        """Decide how to answer a classified message.

        Returns:
            The plan for this message.
        """
        if request_type is RequestType.UNRELATED_QUERY:
            logger.info("Unrelated message; no reply")
            return ResponsePlan.silent()

        if request_type is RequestType.BROKER_ID_SETUP_INQUIRY:
            return ResponsePlan.canned(BROKER_ESCALATION_RESPONSE)

        if request_type is RequestType.BOT_RELATED_INQUIRY:
            return ResponsePlan.complete(
                self._conversation(BOT_PERSONA_PROMPT, question, history)
            )

        fallback = request_type is not RequestType.DOCUMENTATION_QUERY
        if fallback:
            logger.warning(
                "Request type %r routed to documentation search", str(request_type)
            )
        if not self.pipeline.docs_available:
            logger.warning("Doc index unavailable; replying with notice")
            return ResponsePlan.notice(SEARCH_UNAVAILABLE_RESPONSE)

        system_prompt = self.build_documentation_prompt(question, fallback=fallback)
        return ResponsePlan.complete(
            self._conversation(system_prompt, question, history)
        )
