"""Offline builder that distills chat exports into a knowledge base file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from openai import OpenAIError
from pydantic import BaseModel, ValidationError

from .completion import CompletionClient, MissingAPIKeyError
from .config import config
from .models import ChatMessage, KnowledgeItem
from .prompts import ANALYSIS_SYSTEM_PROMPT_TEMPLATE, ANALYSIS_USER_PROMPT_TEMPLATE

logger = config.get_logger(__name__)

FINAL_ANALYSIS_FILENAME = "final_orderly_qa_analysis.json"

# Transcripts longer than this may exceed the model's context window.
LARGE_TRANSCRIPT_CHARACTERS = 300_000


class QAPairsResponse(BaseModel):
    """Top-level shape of the analysis response."""

    qa_pairs: list[Any]


def format_chat_messages(messages: object) -> str:
    """Flatten a Telegram export ``messages`` array into transcript lines.

    Each line reads ``<from> (<date>): <text>``. Rich-text arrays are
    concatenated and messages without text are dropped.

    Returns:
        The transcript, one message per line.
    """
    if not isinstance(messages, list):
        return ""

    lines = []
    for message in messages:
        if not isinstance(message, dict):
            continue
        author = message.get("from") or message.get("from_id") or "Unknown User"
        date = message.get("date") or ""
        text = message.get("text")
        if isinstance(text, list):
            text = "".join(
                part if isinstance(part, str) else str(part.get("text", ""))
                for part in text
                if isinstance(part, (str, dict))
            )
        if not isinstance(text, str) or not text.strip():
            continue
        lines.append(f"{author} ({date}): {text}")
    return "\n".join(lines)


def find_export_files(exports_dir: Path) -> list[Path]:
    """List ``chat_*.json`` exports, largest first.

    Previously written ``*_analysis.json`` files are ignored.

    Returns:
        Export file paths ordered by size, descending.
    """
    files = [
        path
        for path in exports_dir.glob("chat_*.json")
        if path.is_file() and not path.name.endswith("_analysis.json")
    ]
    return sorted(files, key=lambda path: path.stat().st_size, reverse=True)


class KnowledgeBaseBuilder:
    """Extracts Q&A pairs from chat transcripts with a completion model."""

    def __init__(
        self,
        completion_client: CompletionClient,
        model: str | None = None,
    ) -> None:
        self.completion_client = completion_client
        self.model = model or config.ANALYSIS_MODEL

    def extract_pairs(
        self,
        chat_content: str,
        existing_pairs: list[KnowledgeItem],
    ) -> list[KnowledgeItem]:
        """Ask the model for new or refined Q&A pairs from one transcript.

        Returns:
            Valid pairs from the response; empty on any failure.
        """
        if not chat_content.strip():
            logger.info("Chat content is empty. Skipping analysis.")
            return []

        system_prompt = ANALYSIS_SYSTEM_PROMPT_TEMPLATE.format(
            existing_pairs=json.dumps(
                [item.to_dict() for item in existing_pairs], indent=2
            )
        )
        messages = [
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(
                role="user",
                content=ANALYSIS_USER_PROMPT_TEMPLATE.format(chat_content=chat_content),
            ),
        ]

        try:
            raw_response = self.completion_client.complete_json(
                messages, model=self.model
            )
        except (OpenAIError, MissingAPIKeyError):
            logger.exception("Error calling the analysis model")
            return []

        if not raw_response:
            logger.error("Analysis model returned an empty response")
            return []
        logger.debug("Analysis response snippet: %s", raw_response[:200])

        try:
            parsed = QAPairsResponse.model_validate_json(raw_response)
        except ValidationError:
            logger.exception(
                "Analysis response was not in the expected format: %s", raw_response
            )
            return []

        pairs = [KnowledgeItem.from_dict(entry) for entry in parsed.qa_pairs]
        valid_pairs = [pair for pair in pairs if pair is not None]
        if len(valid_pairs) != len(pairs):
            logger.warning(
                "Dropped %d incomplete Q&A pairs", len(pairs) - len(valid_pairs)
            )
        return valid_pairs

    def build(
        self, exports_dir: Path, max_files: int | None = None
    ) -> list[KnowledgeItem]:
        """Analyze export files in order and accumulate their Q&A pairs.

        Returns:
            All pairs extracted across the processed files.
        """
        files = find_export_files(exports_dir)
        logger.info("Found %d chat files to analyze", len(files))
        if max_files is not None:
            files = files[:max_files]

        cumulative: list[KnowledgeItem] = []
        for position, path in enumerate(files, start=1):
            logger.info(
                "Processing file %d/%d: %s (%.2f MB)",
                position,
                len(files),
                path.name,
                path.stat().st_size / (1024 * 1024),
            )
            try:
                chat_data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                logger.exception("Error reading or parsing chat file %s", path)
                continue

            if not isinstance(chat_data, dict) or "messages" not in chat_data:
                logger.error('Chat file %s does not contain a "messages" array', path)
                continue

            transcript = format_chat_messages(chat_data["messages"])
            if not transcript.strip():
                logger.info("No text content found in %s; skipping", path.name)
                continue
            if len(transcript) > LARGE_TRANSCRIPT_CHARACTERS:
                logger.warning(
                    "Transcript for %s is very long (%d chars)",
                    path.name,
                    len(transcript),
                )

            new_pairs = self.extract_pairs(transcript, cumulative)
            cumulative.extend(new_pairs)
            logger.info(
                "%s returned %d new/refined pairs (cumulative: %d)",
                path.name,
                len(new_pairs),
                len(cumulative),
            )

        return cumulative

    @staticmethod
    def write(items: list[KnowledgeItem], output_path: Path) -> None:
        """Write the pairs as a JSON array in the knowledge base format."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            json.dumps([item.to_dict() for item in items], indent=2),
            encoding="utf-8",
        )
        logger.info("Saved %d Q&A pairs to %s", len(items), output_path)
