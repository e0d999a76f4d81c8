"""DocBot - retrieval-augmented documentation assistant for Telegram."""

from .bot import DocBot
from .classifier import ClassificationResponse, QueryClassifier
from .completion import CompletionClient, MissingAPIKeyError
from .context import ContextAssembler, ResponsePlan, pack_context
from .document_processing import DocChunker, DocumentLoader
from .formatting import (
    demote_headings,
    escape_markdown_v2,
    fix_relative_links,
    format_for_chat,
    prepare_answer,
)
from .history import ConversationHistoryStore
from .knowledge_builder import KnowledgeBaseBuilder
from .models import (
    ChatMessage,
    DocChunk,
    IncomingMessage,
    KnowledgeItem,
    RequestType,
    Update,
)
from .offset_store import OffsetStore
from .pipeline import RetrievalPipeline
from .poller import UpdatePoller
from .search import FuzzySearchIndex
from .telegram import TelegramClient, TelegramError

__all__ = [
    "ChatMessage",
    "ClassificationResponse",
    "CompletionClient",
    "ContextAssembler",
    "ConversationHistoryStore",
    "DocBot",
    "DocChunk",
    "DocChunker",
    "DocumentLoader",
    "FuzzySearchIndex",
    "IncomingMessage",
    "KnowledgeBaseBuilder",
    "KnowledgeItem",
    "MissingAPIKeyError",
    "OffsetStore",
    "QueryClassifier",
    "RequestType",
    "ResponsePlan",
    "RetrievalPipeline",
    "TelegramClient",
    "TelegramError",
    "Update",
    "UpdatePoller",
    "demote_headings",
    "escape_markdown_v2",
    "fix_relative_links",
    "format_for_chat",
    "pack_context",
    "prepare_answer",
]
