"""Durable storage of the last processed Telegram update id."""

from __future__ import annotations

import os
from pathlib import Path

from .config import config

logger = config.get_logger(__name__)


class OffsetStore:
    """Reads and writes the poll offset as a plain-text integer file.

    A missing file means offset 0. Writes go through a temporary sibling
    file that is renamed over the target, so readers never see a partial
    value; if one is found anyway it is treated as 0 and the batch is
    delivered again.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path or config.OFFSET_FILE_PATH)

    def read(self) -> int:
        """Return the persisted offset.

        Raises:
            OSError: If the file exists but cannot be read.
        """
        try:
            data = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No offset file at %s; starting from 0", self.path)
            return 0

        try:
            offset = int(data.strip())
        except ValueError:
            logger.warning("Offset file %s holds %r; starting from 0", self.path, data)
            return 0
        if offset < 0:
            logger.warning("Offset file %s holds negative %d; using 0", self.path, offset)
            return 0
        return offset

    def write(self, offset: int) -> None:
        """Persist the offset atomically.

        Raises:
            ValueError: If the offset is negative.
        """
        if offset < 0:
            msg = f"offset must be non-negative, got {offset}"
            raise ValueError(msg)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        with tmp_path.open("w", encoding="utf-8") as file:
            file.write(str(offset))
            file.flush()
            os.fsync(file.fileno())
        tmp_path.replace(self.path)
