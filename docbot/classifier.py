"""Routing of user messages into request categories via a completion call."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from openai import OpenAIError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .completion import CompletionClient, MissingAPIKeyError
from .config import config
from .models import ChatMessage, RequestType
from .prompts import CLASSIFICATION_PROMPT

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = config.get_logger(__name__)


class ClassificationResponse(BaseModel):
    """The exact JSON object the classification call must return."""

    model_config = ConfigDict(extra="forbid")

    request_type: Literal[
        "documentation_query",
        "bot_related_inquiry",
        "broker_id_setup_inquiry",
        "unrelated_query",
    ] = Field(alias="requestType")


class QueryClassifier:
    """Classifies a message into one of four request types.

    Classification never blocks answering: any failure yields
    ``RequestType.UNCLASSIFIED``, which is routed like a documentation query.
    The classifier reads conversation history but never changes it.
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        temperature: float | None = None,
    ) -> None:
        self.completion_client = completion_client
        self.temperature = (
            config.CLASSIFICATION_TEMPERATURE if temperature is None else temperature
        )

    @staticmethod
    def build_messages(
        question: str, history: Sequence[ChatMessage]
    ) -> list[ChatMessage]:
        return [
            ChatMessage(role="system", content=CLASSIFICATION_PROMPT),
            *history,
            ChatMessage(role="user", content=question),
        ]

    @staticmethod
    def parse_response(raw_response: str) -> RequestType:
        """Validate a raw classification response.

        Returns:
            The request type named by the response.

        Raises:
            pydantic.ValidationError: If the response is not JSON or does not
                match the ``{"requestType": ...}`` schema.
        """
        parsed = ClassificationResponse.model_validate_json(raw_response)
        return RequestType(parsed.request_type)

    def classify(
        self, question: str, history: Sequence[ChatMessage] = ()
    ) -> RequestType:
        """Classify a user message.

        Returns:
            The request type, or ``RequestType.UNCLASSIFIED`` on any failure.
        """
        messages = self.build_messages(question, history)
        try:
            raw_response = self.completion_client.complete_json(
                messages, temperature=self.temperature
            )
        except (OpenAIError, MissingAPIKeyError):
            logger.exception("Error during request classification call")
            return RequestType.UNCLASSIFIED

        if not raw_response:
            logger.error("Classification call returned an empty response")
            return RequestType.UNCLASSIFIED

        try:
            request_type = self.parse_response(raw_response)
        except ValidationError as e:
            logger.error(  # noqa: TRY400
                "Classification response failed validation: %s\nRaw response: %s",
                e,
                raw_response,
            )
            return RequestType.UNCLASSIFIED

        logger.info("Classified request as %s", request_type)
        return request_type
