"""Test configuration and fixtures for DocBot tests.

This module provides reusable test fixtures organized by functionality:
- Constants and test data
- Mock completion API responses
- A fake Telegram Bot API served through ``httpx.MockTransport``
- Retrieval pipeline and bot fixtures wired without network access
"""

import json
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import Mock, patch

import httpx
import pytest

from docbot import (
    CompletionClient,
    ContextAssembler,
    ConversationHistoryStore,
    DocBot,
    DocumentLoader,
    OffsetStore,
    QueryClassifier,
    RetrievalPipeline,
    TelegramClient,
    UpdatePoller,
)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
TEST_DATA_DIR = PROJECT_ROOT / "tests" / "data"


class TestConstants:
    """Centralized test constants to avoid repetition across test files."""

    # API Configuration
    TEST_API_KEY = "test-key"
    TEST_BOT_TOKEN = "123456:test-token"
    TEST_API_URL = "https://telegram.test"
    TEST_DOCS_BASE_URL = "https://orderly.network/docs"

    # Telegram identities
    BOT_USER_ID = 4242
    CHAT_ID = 1001
    OTHER_USER_ID = 77

    # Retrieval
    SAMPLE_DOC_SECTIONS = 3


def create_mock_chat_response(content: str | None) -> Mock:
    """Create a mock OpenAI chat completion response.

    Args:
        content: The content for the chat completion response.

    Returns:
        Mock object representing OpenAI chat completion response.
    """
    mock_response = Mock()
    mock_response.choices = [Mock(message=Mock(content=content))]
    return mock_response


def make_message_update(  # noqa: PLR0913
    update_id: int,
    text: str | None,
    *,
    chat_id: int = TestConstants.CHAT_ID,
    message_id: int | None = None,
    reply_to_user_id: int | None = None,
) -> dict:
    """Build a raw Telegram ``Update`` carrying a message."""  # noqa: DOC201
    message: dict = {
        "message_id": message_id if message_id is not None else update_id * 10,
        "chat": {"id": chat_id, "type": "supergroup"},
        "from": {"id": TestConstants.OTHER_USER_ID, "is_bot": False},
    }
    if text is not None:
        message["text"] = text
    if reply_to_user_id is not None:
        message["reply_to_message"] = {
            "message_id": 1,
            "chat": {"id": chat_id},
            "from": {"id": reply_to_user_id, "is_bot": True},
        }
    return {"update_id": update_id, "message": message}


class FakeTelegramAPI:
    """In-memory Bot API behind an ``httpx.MockTransport``.

    ``batches`` are returned by successive ``getUpdates`` calls (then empty
    lists). Every ``sendMessage`` payload is kept in ``sent``. ``calls``
    records every request, including the ones made to fail.
    """

    def __init__(self) -> None:
        self.batches: list[list[dict]] = []
        self.sent: list[dict] = []
        self.get_updates_calls: list[dict] = []
        self.get_me_calls = 0
        self.failures: dict[str, list[Exception | dict]] = {}
        self.calls: list[tuple[str, dict]] = []

    def fail_next(self, method: str, failure: Exception | dict) -> None:
        """Make the next call to ``method`` raise or return an error body."""
        self.failures.setdefault(method, []).append(failure)

    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        payload = json.loads(request.content or b"{}")
        self.calls.append((method, payload))

        pending = self.failures.get(method)
        if pending:
            failure = pending.pop(0)
            if isinstance(failure, Exception):
                raise failure
            return httpx.Response(400, json=failure)

        if method == "getMe":
            self.get_me_calls += 1
            result = {"id": TestConstants.BOT_USER_ID, "is_bot": True}
        elif method == "getUpdates":
            self.get_updates_calls.append(payload)
            result = self.batches.pop(0) if self.batches else []
        elif method == "sendMessage":
            self.sent.append(payload)
            result = {"message_id": 9000 + len(self.sent), "chat": {"id": 1}}
        else:
            return httpx.Response(404, json={"ok": False, "error_code": 404})
        return httpx.Response(200, json={"ok": True, "result": result})

    @property
    def sent_texts(self) -> list[str]:
        return [payload["text"] for payload in self.sent]


@pytest.fixture
def fake_telegram() -> FakeTelegramAPI:
    return FakeTelegramAPI()


@pytest.fixture
def telegram_client(fake_telegram):
    """TelegramClient talking to the in-memory Bot API."""
    client = TelegramClient(
        token=TestConstants.TEST_BOT_TOKEN,
        api_url=TestConstants.TEST_API_URL,
        http_client=httpx.Client(transport=httpx.MockTransport(fake_telegram.handler)),
    )
    yield client
    client.close()


@pytest.fixture(scope="session")
def sample_docs_path():
    return TEST_DATA_DIR / "sample_docs.txt"


@pytest.fixture(scope="session")
def sample_docs_text(sample_docs_path):
    return sample_docs_path.read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def knowledge_file_path():
    return TEST_DATA_DIR / "knowledge.json"


@pytest.fixture
def retrieval_pipeline(sample_docs_text, knowledge_file_path):
    """RetrievalPipeline with both indexes built from the sample data."""
    pipeline = RetrievalPipeline(
        docs_url="https://docs.test/llms-full.txt",
        knowledge_file_path=knowledge_file_path,
    )
    pipeline.build_doc_index(sample_docs_text)
    pipeline.build_knowledge_index(
        DocumentLoader.load_knowledge_base(knowledge_file_path)
    )
    return pipeline


@pytest.fixture
def empty_pipeline(tmp_path):
    """RetrievalPipeline whose indexes were never built."""
    return RetrievalPipeline(
        docs_url="https://docs.test/llms-full.txt",
        knowledge_file_path=tmp_path / "missing.json",
    )


@pytest.fixture
def completion_client():
    return CompletionClient(api_key=TestConstants.TEST_API_KEY)


@pytest.fixture
def completion_mock_factory():
    """Factory mock fixture for CompletionClient's chat.completions.create.

    ``responses`` are returned in order; exceptions in the list are raised.
    """

    @contextmanager
    def _mock_completion(completion_client, *responses):  # noqa: ANN202
        side_effect = [
            response
            if isinstance(response, Exception)
            else create_mock_chat_response(response)
            for response in responses
        ]
        with patch.object(
            completion_client.client.chat.completions, "create"
        ) as mock_create:
            mock_create.side_effect = side_effect
            yield mock_create

    return _mock_completion


@pytest.fixture
def history_store():
    return ConversationHistoryStore(max_messages=10)


@pytest.fixture
def bot_factory(telegram_client, completion_client, history_store):
    """Factory building a DocBot around a given retrieval pipeline."""

    def _create_bot(pipeline: RetrievalPipeline) -> DocBot:
        return DocBot(
            telegram=telegram_client,
            completion_client=completion_client,
            classifier=QueryClassifier(completion_client),
            assembler=ContextAssembler(pipeline),
            history=history_store,
            docs_base_url=TestConstants.TEST_DOCS_BASE_URL,
        )

    return _create_bot


@pytest.fixture
def doc_bot(bot_factory, retrieval_pipeline):
    return bot_factory(retrieval_pipeline)


@pytest.fixture
def offset_store(tmp_path):
    return OffsetStore(tmp_path / "last_update_id.txt")


@pytest.fixture
def poller_factory(telegram_client, offset_store):
    """Factory for UpdatePoller instances that never really sleep."""

    def _create_poller(bot) -> UpdatePoller:
        return UpdatePoller(
            telegram_client,
            bot,
            offset_store,
            poll_timeout=0,
            batch_limit=100,
            retry_delay=5,
            sleep=Mock(),
        )

    return _create_poller
