"""Configuration management for the DocBot application."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"

if env_path.exists():
    load_dotenv(env_path)


class Config:
    """Application configuration loaded from environment variables."""

    # Telegram Configuration
    @classmethod
    def get_telegram_token(cls) -> str:
        """Get the Telegram bot token from environment variables.

        Returns:
            Bot token from environment or empty string if not set.
        """
        return os.getenv("TELEGRAM_BOT_TOKEN", "")

    TELEGRAM_API_URL: str = os.getenv("TELEGRAM_API_URL", "https://api.telegram.org")

    # Completion API Configuration
    @classmethod
    def get_completion_api_key(cls) -> str:
        """Get the completion API key from environment variables.

        Returns:
            API key from COMPLETION_API_KEY, falling back to CEREBRAS_API_KEY,
            or empty string if neither is set.
        """
        return os.getenv("COMPLETION_API_KEY") or os.getenv("CEREBRAS_API_KEY", "")

    COMPLETION_BASE_URL: str = os.getenv(
        "COMPLETION_BASE_URL", "https://api.cerebras.ai/v1"
    )

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    OPENAI_LOG_LEVEL: str = os.getenv("OPENAI_LOG_LEVEL", "WARNING").upper()
    HTTPX_LOG_LEVEL: str = os.getenv("HTTPX_LOG_LEVEL", "WARNING").upper()

    # Chat Model Configuration
    CHAT_MODEL: str = os.getenv("CHAT_MODEL", "qwen-3-235b-a22b-instruct-2507")
    CLASSIFICATION_TEMPERATURE: float = float(
        os.getenv("CLASSIFICATION_TEMPERATURE", "0.1")
    )

    # Documentation Source Configuration
    DOCS_URL: str = os.getenv("DOCS_URL", "https://orderly.network/docs/llms-full.txt")
    DOCS_BASE_URL: str = os.getenv("DOCS_BASE_URL", "https://orderly.network/docs")
    DOCS_FETCH_TIMEOUT: float = float(os.getenv("DOCS_FETCH_TIMEOUT", "30"))
    INTERNAL_SOURCE_MARKER: str = os.getenv("INTERNAL_SOURCE_MARKER", "tech-doc")

    # Local Files
    KNOWLEDGE_FILE_PATH: Path = Path(
        os.getenv("KNOWLEDGE_FILE_PATH", "knowledge.json")
    )
    OFFSET_FILE_PATH: Path = Path(os.getenv("OFFSET_FILE_PATH", "last_update_id.txt"))

    # Retrieval Configuration
    MAX_DOC_RESULTS: int = int(os.getenv("MAX_DOC_RESULTS", "7"))
    MAX_DOC_CONTEXT_CHARACTERS: int = int(
        os.getenv("MAX_DOC_CONTEXT_CHARACTERS", "10000")
    )
    MAX_KNOWLEDGE_RESULTS: int = int(os.getenv("MAX_KNOWLEDGE_RESULTS", "15"))
    MAX_KB_CONTEXT_CHARACTERS: int = int(
        os.getenv("MAX_KB_CONTEXT_CHARACTERS", "5000")
    )
    DOC_SEARCH_THRESHOLD: float = float(os.getenv("DOC_SEARCH_THRESHOLD", "0.5"))
    KNOWLEDGE_SEARCH_THRESHOLD: float = float(
        os.getenv("KNOWLEDGE_SEARCH_THRESHOLD", "0.6")
    )

    # Conversation Configuration
    MAX_HISTORY_MESSAGES: int = int(os.getenv("MAX_HISTORY_MESSAGES", "10"))

    # Polling Configuration
    POLL_TIMEOUT: int = int(os.getenv("POLL_TIMEOUT", "5"))
    POLL_LIMIT: int = int(os.getenv("POLL_LIMIT", "100"))
    POLL_RETRY_DELAY: float = float(os.getenv("POLL_RETRY_DELAY", "5"))

    # Knowledge Base Builder Configuration
    @classmethod
    def get_analysis_api_key(cls) -> str:
        """Get the API key used by the knowledge base builder.

        Returns:
            API key from ANALYSIS_API_KEY, falling back to OPENAI_API_KEY,
            or empty string if neither is set.
        """
        return os.getenv("ANALYSIS_API_KEY") or os.getenv("OPENAI_API_KEY", "")

    ANALYSIS_BASE_URL: str = os.getenv("ANALYSIS_BASE_URL", "https://api.openai.com/v1")
    ANALYSIS_MODEL: str = os.getenv("ANALYSIS_MODEL", "o4-mini")
    CHAT_EXPORTS_DIR: Path = Path(
        os.getenv("CHAT_EXPORTS_DIR", "telegram_chat_exports")
    )

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration values.

        Raises:
            ValueError: If TELEGRAM_BOT_TOKEN is not set.
        """
        if not cls.get_telegram_token():
            msg = (
                "TELEGRAM_BOT_TOKEN is required. "
                "Please set it in .env file or environment."
            )
            raise ValueError(msg)

    @classmethod
    def setup_logging(cls) -> None:
        """Configure root logging for the bot process.

        Called once by ``main.py`` before any service is built. The openai
        and httpx loggers get their own levels.
        """
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )

        # Library loggers
        logging.getLogger("openai").setLevel(
            getattr(logging, cls.OPENAI_LOG_LEVEL, logging.WARNING)
        )
        logging.getLogger("httpx").setLevel(
            getattr(logging, cls.HTTPX_LOG_LEVEL, logging.WARNING)
        )

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger with the specified name.

        Args:
            name: Dotted module name, usually __name__.

        Returns:
            The named logger.
        """
        return logging.getLogger(name)


config = Config()
