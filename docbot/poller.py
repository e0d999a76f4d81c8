"""Long-polling loop with at-least-once delivery and a durable offset."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import httpx

from .config import config
from .telegram import TelegramError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .bot import DocBot
    from .offset_store import OffsetStore
    from .telegram import TelegramClient

logger = config.get_logger(__name__)


class UpdatePoller:
    """Fetches update batches and feeds them to the bot one at a time.

    The offset is persisted only after every update of a batch has been
    handled. A crash mid-batch therefore re-delivers the whole batch.
    """

    def __init__(  # noqa: PLR0913
        self,
        telegram: TelegramClient,
        bot: DocBot,
        offset_store: OffsetStore,
        *,
        poll_timeout: int | None = None,
        batch_limit: int | None = None,
        retry_delay: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.telegram = telegram
        self.bot = bot
        self.offset_store = offset_store
        self.poll_timeout = config.POLL_TIMEOUT if poll_timeout is None else poll_timeout
        self.batch_limit = config.POLL_LIMIT if batch_limit is None else batch_limit
        self.retry_delay = config.POLL_RETRY_DELAY if retry_delay is None else retry_delay
        self.sleep = sleep
        self.last_update_id: int | None = None

    def start(self) -> int:
        """Load the persisted offset.

        Returns:
            The last fully processed update id.

        Raises:
            OSError: If the offset file exists but cannot be read.
        """
        self.last_update_id = self.offset_store.read()
        logger.info(
            "Bot starting... Initial last processed update ID: %d",
            self.last_update_id,
        )
        return self.last_update_id

    def poll_once(self) -> int:
        """Fetch one batch, dispatch it in order, then persist the offset.

        Returns:
            Number of updates dispatched.
        """
        last_update_id = (
            self.start() if self.last_update_id is None else self.last_update_id
        )

        updates = self.telegram.get_updates(
            last_update_id + 1,
            timeout=self.poll_timeout,
            limit=self.batch_limit,
        )
        if not updates:
            return 0

        highest = last_update_id
        for update in updates:
            self.bot.handle_update(update)
            highest = max(highest, update.update_id)

        self.offset_store.write(highest)
        self.last_update_id = highest
        logger.info("Successfully processed updates up to ID: %d", highest)
        return len(updates)

    def run_forever(self) -> None:
        """Poll until the process is stopped.

        Transport failures are logged and retried after ``retry_delay``
        seconds. Any other exception propagates to the caller.
        """
        if self.last_update_id is None:
            self.start()
        while True:
            try:
                self.poll_once()
            except (httpx.HTTPError, TelegramError):
                logger.exception(
                    "Error fetching or processing updates; retrying in %.0fs",
                    self.retry_delay,
                )
                self.sleep(self.retry_delay)
