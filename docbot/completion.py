"""OpenAI-compatible chat completion client."""

from __future__ import annotations

from typing import TYPE_CHECKING

from openai import OpenAI

from .config import config

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .models import ChatMessage

logger = config.get_logger(__name__)


class MissingAPIKeyError(RuntimeError):
    """Raised when a model call is attempted without a completion API key."""


class CompletionClient:
    """Issues chat completion requests against an OpenAI-compatible endpoint.

    The underlying ``OpenAI`` client is created on first use, so a missing
    API key only affects the request that needs it.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        *,
        api_key_getter: Callable[[], str] | None = None,
        api_key_name: str = "COMPLETION_API_KEY",
    ) -> None:
        """Initialize the CompletionClient.

        Args:
            api_key: Completion API key. If None, read from the environment
                when the first request is made.
            base_url: API base URL. If None, uses config.COMPLETION_BASE_URL.
            model: Default model name. If None, uses config.CHAT_MODEL.
            api_key_getter: Reads the key when ``api_key`` is None. Defaults
                to config.get_completion_api_key.
            api_key_name: Variable named in the missing-key error.
        """
        self._api_key = api_key
        self.base_url = base_url or config.COMPLETION_BASE_URL
        self.model = model or config.CHAT_MODEL
        self._api_key_getter = api_key_getter or config.get_completion_api_key
        self.api_key_name = api_key_name
        self._client: OpenAI | None = None

    @property
    def client(self) -> OpenAI:
        """The lazily constructed OpenAI client.

        Raises:
            MissingAPIKeyError: If no API key is configured.
        """
        if self._client is None:
            api_key = self._api_key or self._api_key_getter()
            if not api_key:
                msg = f"{self.api_key_name} environment variable is not set"
                raise MissingAPIKeyError(msg)
            self._client = OpenAI(api_key=api_key, base_url=self.base_url)
            logger.info("Completion client created for %s", self.base_url)
        return self._client

    def complete_json(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float | None = None,
        model: str | None = None,
    ) -> str | None:
        """Request a response constrained to a single JSON object.

        Returns:
            The raw response text, or None if the model returned no content.
        """
        kwargs = {}
        if temperature is not None:
            kwargs["temperature"] = temperature
        response = self.client.chat.completions.create(
            model=model or self.model,
            messages=[message.to_param() for message in messages],
            response_format={"type": "json_object"},
            **kwargs,
        )
        return response.choices[0].message.content if response.choices else None

    def complete_text(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
    ) -> str | None:
        """Request a free-text response.

        Returns:
            The response text, or None if the model returned no content.
        """
        response = self.client.chat.completions.create(
            model=model or self.model,
            messages=[message.to_param() for message in messages],
        )
        return response.choices[0].message.content if response.choices else None
