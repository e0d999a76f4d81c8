"""Minimal Telegram Bot API client over httpx."""

from __future__ import annotations

from typing import Any

import httpx

from .config import config
from .models import Update

logger = config.get_logger(__name__)

# Extra seconds on top of the long-poll timeout before the HTTP call gives up.
_LONG_POLL_GRACE = 10.0


class TelegramError(RuntimeError):
    """The Bot API answered with ``ok: false``."""

    def __init__(self, method: str, error_code: int | None, description: str) -> None:
        super().__init__(f"Telegram {method} failed ({error_code}): {description}")
        self.method = method
        self.error_code = error_code
        self.description = description


class TelegramClient:
    """Calls the Bot API methods the bot needs: getMe, getUpdates, sendMessage."""

    def __init__(
        self,
        token: str | None = None,
        api_url: str | None = None,
        http_client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the TelegramClient.

        Args:
            token: Bot token. If None, uses config.get_telegram_token().
            api_url: Bot API root. If None, uses config.TELEGRAM_API_URL.
            http_client: Client to send requests with; one is created if None.
            timeout: Default request timeout in seconds.
        """
        token = token or config.get_telegram_token()
        api_url = (api_url or config.TELEGRAM_API_URL).rstrip("/")
        self.base_url = f"{api_url}/bot{token}"
        self.http_client = http_client or httpx.Client(timeout=timeout)
        self._bot_id: int | None = None

    def _call(
        self,
        method: str,
        payload: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:  # noqa: ANN401
        """Invoke a Bot API method.

        Returns:
            The ``result`` field of the response.

        Raises:
            TelegramError: If the API reports a failure.
            httpx.HTTPError: On transport failure or an HTTP error without a
                Bot API error body.
        """
        kwargs: dict[str, Any] = {"json": payload or {}}
        if timeout is not None:
            kwargs["timeout"] = timeout
        response = self.http_client.post(f"{self.base_url}/{method}", **kwargs)

        try:
            body = response.json()
        except ValueError as e:
            response.raise_for_status()
            raise TelegramError(
                method, response.status_code, "response body is not JSON"
            ) from e

        if not body.get("ok"):
            raise TelegramError(
                method, body.get("error_code"), body.get("description", "")
            )
        return body.get("result")

    def get_me(self) -> dict[str, Any]:
        return self._call("getMe")

    @property
    def bot_id(self) -> int:
        """The bot's own user id, fetched once via ``getMe``."""
        if self._bot_id is None:
            self._bot_id = int(self.get_me()["id"])
        return self._bot_id

    def get_updates(
        self,
        offset: int,
        *,
        timeout: int | None = None,
        limit: int | None = None,
        allowed_updates: tuple[str, ...] = ("message",),
    ) -> list[Update]:
        """Long-poll for updates with ids of at least ``offset``.

        Returns:
            Updates in ascending id order.
        """
        if timeout is None:
            timeout = config.POLL_TIMEOUT
        if limit is None:
            limit = config.POLL_LIMIT
        result = self._call(
            "getUpdates",
            {
                "offset": offset,
                "timeout": timeout,
                "limit": limit,
                "allowed_updates": list(allowed_updates),
            },
            timeout=timeout + _LONG_POLL_GRACE,
        )
        return [Update.from_dict(item) for item in result or []]

    def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        parse_mode: str | None = None,
        reply_to_message_id: int | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if reply_to_message_id is not None:
            payload["reply_parameters"] = {
                "message_id": reply_to_message_id,
                "allow_sending_without_reply": True,
            }
        return self._call("sendMessage", payload)

    def close(self) -> None:
        self.http_client.close()
