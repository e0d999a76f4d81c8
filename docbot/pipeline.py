"""Retrieval pipeline owning the documentation and knowledge base indexes."""

from __future__ import annotations

from pathlib import Path

import httpx

from .config import config
from .document_processing import DocChunker, DocumentLoader
from .models import DocChunk, KnowledgeItem
from .search import FuzzySearchIndex

logger = config.get_logger(__name__)


class RetrievalPipeline:
    """Builds and queries the two fuzzy indexes: Fetch -> Chunk -> Index.

    Either index may be missing. A failed documentation fetch or a broken
    knowledge base file disables that source without stopping the bot.
    """

    def __init__(
        self,
        docs_url: str | None = None,
        knowledge_file_path: Path | None = None,
        chunker: DocChunker | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the retrieval pipeline.

        Args:
            docs_url: Documentation blob URL. If None, uses config.DOCS_URL.
            knowledge_file_path: Knowledge base JSON file. If None, uses
                config.KNOWLEDGE_FILE_PATH.
            chunker: Section parser. If None, a default DocChunker is used.
            http_client: Optional client used for the documentation fetch.
        """
        self.docs_url = docs_url or config.DOCS_URL
        self.knowledge_file_path = Path(
            knowledge_file_path or config.KNOWLEDGE_FILE_PATH
        )
        self.chunker = chunker or DocChunker()
        self.http_client = http_client

        self.doc_index: FuzzySearchIndex[DocChunk] | None = None
        self.knowledge_index: FuzzySearchIndex[KnowledgeItem] | None = None

    @property
    def docs_available(self) -> bool:
        return self.doc_index is not None

    def build_doc_index(self, text: str) -> None:
        """Chunk a documentation blob and replace the documentation index."""
        chunks = self.chunker.chunk_text(text)
        if not chunks:
            self.doc_index = None
            return
        self.doc_index = FuzzySearchIndex(
            chunks,
            key=DocChunk.to_search_text,
            threshold=config.DOC_SEARCH_THRESHOLD,
        )
        logger.info("Doc index initialized with %d searchable chunks", len(chunks))

    def build_knowledge_index(self, items: list[KnowledgeItem]) -> None:
        """Replace the knowledge base index with the given items."""
        if not items:
            self.knowledge_index = None
            logger.warning("Knowledge base is empty; Q&A search is disabled")
            return
        self.knowledge_index = FuzzySearchIndex(
            items,
            key=lambda item: item.question,
            threshold=config.KNOWLEDGE_SEARCH_THRESHOLD,
        )
        logger.info("Knowledge base initialized with %d Q&A items", len(items))

    def load_documentation(self) -> bool:
        """Fetch and index the documentation.

        Returns:
            True when a non-empty documentation index was built.
        """
        logger.info("Fetching documentation from %s", self.docs_url)
        try:
            text = DocumentLoader.fetch_text(self.docs_url, client=self.http_client)
        except httpx.HTTPError:
            logger.exception("Documentation unavailable; doc search is disabled")
            self.doc_index = None
            return False
        self.build_doc_index(text)
        return self.docs_available

    def load_knowledge_base(self) -> bool:
        """Load and index the knowledge base file.

        Returns:
            True when a non-empty knowledge index was built.
        """
        logger.info("Loading knowledge base from %s", self.knowledge_file_path)
        try:
            items = DocumentLoader.load_knowledge_base(self.knowledge_file_path)
        except (OSError, ValueError):
            # json.JSONDecodeError is a ValueError
            logger.exception("Error loading knowledge base; Q&A search is disabled")
            self.knowledge_index = None
            return False
        self.build_knowledge_index(items)
        return self.knowledge_index is not None

    def initialize(self) -> None:
        """Build both indexes once at startup."""
        self.load_documentation()
        self.load_knowledge_base()

    def search_docs(self, query: str, limit: int) -> list[tuple[DocChunk, float]]:
        if self.doc_index is None:
            return []
        return self.doc_index.search(query, limit=limit)

    def search_knowledge(
        self, query: str, limit: int
    ) -> list[tuple[KnowledgeItem, float]]:
        if self.knowledge_index is None:
            return []
        return self.knowledge_index.search(query, limit=limit)
