"""Documentation loading and section chunking functionality."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING

import httpx

from .config import config
from .models import DocChunk, KnowledgeItem

if TYPE_CHECKING:
    from pathlib import Path

logger = config.get_logger(__name__)

_HEADING_RE = re.compile(r"#\s+(\S.*)")
_SOURCE_RE = re.compile(r"Source:\s*(\S.*)")


class DocumentLoader:
    """Handles loading of the documentation blob and the knowledge base file."""

    @staticmethod
    def fetch_text(
        url: str,
        *,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> str:
        """Fetch a plain-text resource over HTTP.

        Args:
            url: Resource location.
            timeout: Request timeout in seconds. If None, uses
                config.DOCS_FETCH_TIMEOUT.
            client: Optional client to issue the request with.

        Returns:
            The response body as text.

        Raises:
            httpx.HTTPError: On network failure or a non-2xx status.
        """
        if timeout is None:
            timeout = config.DOCS_FETCH_TIMEOUT
        try:
            if client is None:
                response = httpx.get(url, timeout=timeout, follow_redirects=True)
            else:
                response = client.get(url, timeout=timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError:
            logger.exception("Error fetching %s", url)
            raise
        else:
            return response.text

    @staticmethod
    def load_knowledge_base(file_path: Path) -> list[KnowledgeItem]:
        """Load curated Q&A items from a JSON array file.

        Entries missing any of ``question``, ``answer`` or
        ``last_referenced_date`` are skipped.

        Returns:
            The valid knowledge items in file order.

        Raises:
            ValueError: If the file does not contain a JSON array.
        """
        with file_path.open(encoding="utf-8") as file:
            data = json.load(file)

        if not isinstance(data, list):
            msg = f"Knowledge base must be a JSON array, got {type(data).__name__}"
            raise ValueError(msg)

        items = []
        for entry in data:
            item = KnowledgeItem.from_dict(entry)
            if item is not None:
                items.append(item)

        skipped = len(data) - len(items)
        if skipped:
            logger.warning("Skipped %d incomplete knowledge base entries", skipped)
        return items


def _is_section_break(line: str) -> bool:
    return line[:1] == "#" and (len(line) == 1 or line[1].isspace())


class DocChunker:
    """Splits a documentation blob into ``# heading`` / ``Source:`` sections.

    A section starts at a ``# <header>`` line immediately followed by a
    ``Source: <url>`` line. Its body runs until the next line that begins
    with ``#`` and whitespace, or the end of input.
    """

    def __init__(self, internal_marker: str | None = None) -> None:
        """Initialize the DocChunker.

        Args:
            internal_marker: Sections whose source URL contains this substring
                are dropped. If None, uses config.INTERNAL_SOURCE_MARKER.
        """
        if internal_marker is None:
            internal_marker = config.INTERNAL_SOURCE_MARKER
        self.internal_marker = internal_marker

    def chunk_text(self, text: str) -> list[DocChunk]:
        """Parse sections from the documentation text.

        Returns:
            Publishable, non-empty sections in document order.
        """
        lines = text.splitlines()
        chunks: list[DocChunk] = []
        cursor = 0

        while cursor < len(lines):
            heading = _HEADING_RE.fullmatch(lines[cursor])
            source = None
            if heading and cursor + 1 < len(lines):
                source = _SOURCE_RE.fullmatch(lines[cursor + 1])
            if heading is None or source is None:
                cursor += 1
                continue

            body_start = cursor + 2
            cursor = body_start
            while cursor < len(lines) and not _is_section_break(lines[cursor]):
                cursor += 1

            chunk = DocChunk(
                header=heading.group(1).strip(),
                source_url=source.group(1).strip(),
                body="\n".join(lines[body_start:cursor]).rstrip(),
            )
            if self.internal_marker and self.internal_marker in chunk.source_url:
                continue
            if not chunk.body.strip():
                continue
            chunks.append(chunk)

        if not chunks:
            logger.warning(
                "Documentation chunking produced 0 sections; doc search is disabled"
            )
        else:
            logger.info("Documentation split into %d sections", len(chunks))
        return chunks
