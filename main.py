"""Command-line entry point for running DocBot and building its knowledge base."""

from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from docbot import (
    CompletionClient,
    ContextAssembler,
    ConversationHistoryStore,
    DocBot,
    KnowledgeBaseBuilder,
    OffsetStore,
    QueryClassifier,
    RetrievalPipeline,
    TelegramClient,
    UpdatePoller,
)
from docbot.config import config
from docbot.knowledge_builder import FINAL_ANALYSIS_FILENAME, find_export_files

if TYPE_CHECKING:
    from collections.abc import Sequence
    from logging import Logger


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Build the CLI parser and read command-line arguments."""  # noqa: DOC201
    parser = argparse.ArgumentParser(
        description="Telegram assistant answering questions from product docs.",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the bot (default).")
    serve.add_argument(
        "--knowledge-file",
        type=Path,
        default=None,
        help="Knowledge base JSON file (default: KNOWLEDGE_FILE_PATH).",
    )
    serve.add_argument(
        "--offset-file",
        type=Path,
        default=None,
        help="File holding the last processed update id (default: OFFSET_FILE_PATH).",
    )
    serve.add_argument(
        "--docs-url",
        default=None,
        help="Documentation text URL (default: DOCS_URL).",
    )

    build_kb = subparsers.add_parser(
        "build-kb", help="Build a knowledge base from Telegram chat exports."
    )
    build_kb.add_argument(
        "--exports-dir",
        type=Path,
        default=config.CHAT_EXPORTS_DIR,
        help="Directory with chat_*.json exports (default: CHAT_EXPORTS_DIR).",
    )
    build_kb.add_argument(
        "--output",
        type=Path,
        default=None,
        help=f"Output JSON file (default: <exports-dir>/{FINAL_ANALYSIS_FILENAME}).",
    )
    build_kb.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="Only analyze the N largest exports.",
    )

    # serve is the default command, so its options may be given without it
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or (argv[0] not in subparsers.choices and argv[0] not in {"-h", "--help"}):
        argv.insert(0, "serve")
    return parser.parse_args(argv)


def build_poller(args: argparse.Namespace) -> UpdatePoller:
    """Wire the bot's services together and build the indexes."""  # noqa: DOC201
    pipeline = RetrievalPipeline(
        docs_url=args.docs_url,
        knowledge_file_path=args.knowledge_file,
    )
    pipeline.initialize()

    telegram = TelegramClient()
    completion_client = CompletionClient()
    bot = DocBot(
        telegram=telegram,
        completion_client=completion_client,
        classifier=QueryClassifier(completion_client),
        assembler=ContextAssembler(pipeline),
        history=ConversationHistoryStore(),
    )
    return UpdatePoller(telegram, bot, OffsetStore(args.offset_file))


def run_bot(args: argparse.Namespace, logger: Logger) -> int:
    """Validate configuration and poll until stopped."""  # noqa: DOC201
    try:
        config.validate()
    except ValueError:
        logger.exception("Configuration invalid")
        return 1

    logger.info("Initializing bot with manual update polling...")
    poller = build_poller(args)
    try:
        poller.start()
    except OSError:
        logger.exception("Unable to read the persisted update offset")
        return 1

    signal.signal(signal.SIGTERM, signal.default_int_handler)
    try:
        poller.run_forever()
    except KeyboardInterrupt:
        logger.info("Stop signal received, stopping bot...")
        return 0
    except Exception:
        logger.exception("Critical error in polling loop. Exiting.")
        return 1
    finally:
        poller.telegram.close()
    return 0


def run_build_kb(args: argparse.Namespace, logger: Logger) -> int:
    """Analyze chat exports and write the knowledge base file."""  # noqa: DOC201
    exports_dir: Path = args.exports_dir
    if not exports_dir.is_dir():
        logger.error("Chat export directory not found: %s", exports_dir)
        return 1

    if not find_export_files(exports_dir):
        logger.warning("No chat_*.json exports found in %s, nothing written", exports_dir)
        return 0

    client = CompletionClient(
        base_url=config.ANALYSIS_BASE_URL,
        model=config.ANALYSIS_MODEL,
        api_key_getter=config.get_analysis_api_key,
        api_key_name="ANALYSIS_API_KEY",
    )
    builder = KnowledgeBaseBuilder(client)
    items = builder.build(exports_dir, max_files=args.max_files)

    output_path = args.output or exports_dir / FINAL_ANALYSIS_FILENAME
    try:
        builder.write(items, output_path)
    except OSError:
        logger.exception("Error writing knowledge base file %s", output_path)
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Dispatch to the selected command."""  # noqa: DOC201
    args = parse_args(argv)

    config.setup_logging()
    logger = config.get_logger(__name__)

    if args.command == "build-kb":
        return run_build_kb(args, logger)
    return run_bot(args, logger)


if __name__ == "__main__":
    sys.exit(main())
