"""Per-message pipeline: classify, plan, answer, post-process, reply."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from openai import APIStatusError, OpenAIError

from .completion import MissingAPIKeyError
from .config import config
from .formatting import escape_markdown_v2, prepare_answer
from .prompts import (
    AI_UNAVAILABLE_RESPONSE,
    ANSWER_ERROR_RESPONSE,
    API_ERROR_RESPONSE_TEMPLATE,
    EMPTY_ANSWER_RESPONSE,
    HELP_RESPONSE,
    START_RESPONSE,
)
from .telegram import TelegramError

if TYPE_CHECKING:
    from .classifier import QueryClassifier
    from .completion import CompletionClient
    from .context import ContextAssembler, ResponsePlan
    from .history import ConversationHistoryStore
    from .models import IncomingMessage, Update
    from .telegram import TelegramClient

logger = config.get_logger(__name__)

MARKDOWN_V2 = "MarkdownV2"

COMMAND_RESPONSES = {
    "/start": START_RESPONSE,
    "/help": HELP_RESPONSE,
}


def _api_error_message(error: APIStatusError) -> str | None:
    body = error.body
    if isinstance(body, dict):
        detail = body.get("error", body)
        if isinstance(detail, dict) and isinstance(detail.get("message"), str):
            return detail["message"]
    return None


class DocBot:
    """Answers documentation questions arriving as Telegram messages."""

    def __init__(  # noqa: PLR0913
        self,
        telegram: TelegramClient,
        completion_client: CompletionClient,
        classifier: QueryClassifier,
        assembler: ContextAssembler,
        history: ConversationHistoryStore,
        docs_base_url: str | None = None,
    ) -> None:
        self.telegram = telegram
        self.completion_client = completion_client
        self.classifier = classifier
        self.assembler = assembler
        self.history = history
        self.docs_base_url = docs_base_url or config.DOCS_BASE_URL

    def handle_update(self, update: Update) -> None:
        """Run one update through the full pipeline."""
        if update.message is None:
            logger.debug("Skipping update %d without a message", update.update_id)
            return
        self.handle_message(update.message)

    def is_addressed_to_bot(self, message: IncomingMessage) -> bool:
        """Only questions and replies to the bot's own messages are answered."""  # noqa: DOC201
        if message.text and "?" in message.text:
            return True
        return (
            message.reply_to_user_id is not None
            and message.reply_to_user_id == self.telegram.bot_id
        )

    def handle_message(self, message: IncomingMessage) -> None:
        text = message.text
        if not text:
            return
        if text.startswith("/"):
            self._handle_command(message, text)
            return
        if not self.is_addressed_to_bot(message):
            return

        try:
            _ = self.completion_client.client
        except MissingAPIKeyError:
            logger.exception("Failed to create completion client")
            self._reply(message, AI_UNAVAILABLE_RESPONSE)
            return

        history = self.history.get(message.chat_id)
        request_type = self.classifier.classify(text, history)
        plan = self.assembler.plan(request_type, text, history)

        if plan.is_silent:
            return
        if plan.requires_completion:
            self._answer(message, text, plan)
        else:
            self._send_fixed(message, text, plan)

    def _handle_command(self, message: IncomingMessage, text: str) -> None:
        command = text.split(maxsplit=1)[0].split("@", 1)[0].lower()
        response = COMMAND_RESPONSES.get(command)
        if response is not None:
            self._reply(message, response)

    def _answer(self, message: IncomingMessage, question: str, plan: ResponsePlan) -> None:
        try:
            answer = self.completion_client.complete_text(plan.messages or ())
        except MissingAPIKeyError:
            logger.exception("Completion API key missing")
            self._reply(message, AI_UNAVAILABLE_RESPONSE)
            return
        except APIStatusError as e:
            logger.exception("Error calling AI service for answering")
            detail = _api_error_message(e)
            self._reply(
                message,
                API_ERROR_RESPONSE_TEMPLATE.format(message=detail)
                if detail
                else ANSWER_ERROR_RESPONSE,
            )
            return
        except OpenAIError:
            logger.exception("Error calling AI service for answering")
            self._reply(message, ANSWER_ERROR_RESPONSE)
            return

        if not answer or not answer.strip():
            logger.warning("Answering call returned an empty response")
            self._reply(message, EMPTY_ANSWER_RESPONSE)
            return
        readable = prepare_answer(answer, self.docs_base_url)
        sent = self._reply_formatted(message, readable)
        if sent and plan.record_history:
            self.history.record_turn(message.chat_id, question, readable)

    def _send_fixed(
        self, message: IncomingMessage, question: str, plan: ResponsePlan
    ) -> None:
        text = plan.reply_text or ""
        if plan.format_reply:
            sent = self._reply_formatted(
                message, prepare_answer(text, self.docs_base_url)
            )
        else:
            sent = self._reply(message, text)
        if sent and plan.record_history:
            self.history.record_turn(message.chat_id, question, text)

    def _reply_formatted(self, message: IncomingMessage, readable: str) -> bool:
        """Send ``readable`` as MarkdownV2, resending it as plain text on a 400.

        Telegram answers 400 when it cannot parse the entities in a message,
        so the same text goes out once more without markup.

        Returns:
            True if Telegram accepted either attempt.
        """
        try:
            self._send(message, escape_markdown_v2(readable), parse_mode=MARKDOWN_V2)
        except TelegramError as e:
            if e.error_code != 400:
                logger.exception("Failed to send reply to chat %s", message.chat_id)
                return False
            logger.warning(
                "MarkdownV2 reply rejected for chat %s (%s), resending as plain text",
                message.chat_id,
                e.description,
            )
        except httpx.HTTPError:
            logger.exception("Failed to send reply to chat %s", message.chat_id)
            return False
        else:
            return True
        return self._reply(message, readable)

    def _reply(self, message: IncomingMessage, text: str) -> bool:
        """Send a plain-text reply to ``message``; delivery failures are logged.

        Returns:
            True if Telegram accepted the message.
        """
        try:
            self._send(message, text)
        except (httpx.HTTPError, TelegramError):
            logger.exception("Failed to send reply to chat %s", message.chat_id)
            return False
        return True

    def _send(
        self,
        message: IncomingMessage,
        text: str,
        parse_mode: str | None = None,
    ) -> None:
        self.telegram.send_message(
            message.chat_id,
            text,
            parse_mode=parse_mode,
            reply_to_message_id=message.message_id,
        )
