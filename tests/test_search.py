"""Tests for the fuzzy search index and the retrieval pipeline."""

import httpx
import pytest

from docbot.pipeline import RetrievalPipeline
from docbot.search import FuzzySearchIndex


@pytest.fixture
def fruit_index():
    return FuzzySearchIndex(
        ["apple pie recipe", "banana bread", "cherry tart"], key=str, threshold=0.5
    )


def test_exact_substring_scores_zero(fruit_index):
    results = fruit_index.search("banana")

    assert results[0] == ("banana bread", 0.0)


def test_typo_still_matches(fruit_index):
    results = fruit_index.search("aple pie")

    assert results[0][0] == "apple pie recipe"
    assert 0.0 < results[0][1] < 0.5


def test_matching_ignores_case_and_punctuation(fruit_index):
    results = fruit_index.search("Cherry Tart!")

    assert results[0] == ("cherry tart", 0.0)


def test_results_are_ordered_best_first(fruit_index):
    distances = [distance for _, distance in fruit_index.search("bread")]

    assert distances == sorted(distances)


def test_no_match_above_threshold(fruit_index):
    assert fruit_index.search("zzzzqqqq") == []


@pytest.mark.parametrize("query", ["", "   ", "?!"])
def test_empty_query_returns_nothing(fruit_index, query):
    assert fruit_index.search(query) == []


def test_limit(fruit_index):
    assert len(fruit_index.search("a", limit=1)) <= 1


def test_empty_index():
    index = FuzzySearchIndex([], key=str)

    assert len(index) == 0
    assert index.search("anything") == []


def test_zero_threshold_only_keeps_exact_matches(fruit_index):
    strict = FuzzySearchIndex(fruit_index.items, key=str, threshold=0.0)

    assert strict.search("banana") == [("banana bread", 0.0)]
    assert strict.search("aple pie") == []


@pytest.mark.parametrize("threshold", [-0.1, 1.5])
def test_invalid_threshold(threshold):
    with pytest.raises(ValueError, match="threshold"):
        FuzzySearchIndex(["x"], key=str, threshold=threshold)


def test_doc_search(retrieval_pipeline):
    results = retrieval_pipeline.search_docs("deposit funds", limit=7)

    chunk, distance = results[0]
    assert chunk.header == "Deposit Funds"
    assert distance == 0.0
    assert all(0.0 <= d <= 0.5 for _, d in results)


def test_doc_search_respects_limit(retrieval_pipeline):
    results = retrieval_pipeline.search_docs("deposit funds", limit=1)

    assert [chunk.header for chunk, _ in results] == ["Deposit Funds"]


def test_knowledge_search_matches_questions(retrieval_pipeline):
    item, distance = retrieval_pipeline.search_knowledge("broker id", limit=15)[0]

    assert item.question == "How do I get a Broker ID for my exchange?"
    assert distance == 0.0


def test_knowledge_search_ignores_answers(retrieval_pipeline):
    # "application form" only appears in an answer
    results = retrieval_pipeline.search_knowledge("application form", limit=15)

    assert all(distance > 0.0 for _, distance in results)


def test_search_without_indexes(empty_pipeline):
    assert not empty_pipeline.docs_available
    assert empty_pipeline.search_docs("deposit", limit=7) == []
    assert empty_pipeline.search_knowledge("deposit", limit=15) == []


def test_load_documentation(sample_docs_text, tmp_path):
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, text=sample_docs_text)
    )
    pipeline = RetrievalPipeline(
        docs_url="https://docs.test/llms-full.txt",
        knowledge_file_path=tmp_path / "knowledge.json",
        http_client=httpx.Client(transport=transport),
    )

    assert pipeline.load_documentation() is True
    assert pipeline.docs_available
    assert len(pipeline.doc_index) == 3


def test_load_documentation_failure_disables_doc_search(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    pipeline = RetrievalPipeline(
        docs_url="https://docs.test/llms-full.txt",
        knowledge_file_path=tmp_path / "knowledge.json",
        http_client=httpx.Client(transport=transport),
    )

    assert pipeline.load_documentation() is False
    assert pipeline.doc_index is None


def test_documentation_without_sections_disables_doc_search(retrieval_pipeline):
    retrieval_pipeline.build_doc_index("just some text\nwith no sections")

    assert not retrieval_pipeline.docs_available


def test_load_knowledge_base(knowledge_file_path, tmp_path):
    pipeline = RetrievalPipeline(knowledge_file_path=knowledge_file_path)

    assert pipeline.load_knowledge_base() is True
    assert len(pipeline.knowledge_index) == 3


@pytest.mark.parametrize(
    "content", [None, "{broken", '{"not": "a list"}', "[]"], ids=str
)
def test_load_knowledge_base_failures(tmp_path, content):
    path = tmp_path / "knowledge.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")
    pipeline = RetrievalPipeline(knowledge_file_path=path)

    assert pipeline.load_knowledge_base() is False
    assert pipeline.knowledge_index is None


def test_initialize_survives_unavailable_sources(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    pipeline = RetrievalPipeline(
        docs_url="https://docs.test/llms-full.txt",
        knowledge_file_path=tmp_path / "missing.json",
        http_client=httpx.Client(transport=transport),
    )

    pipeline.initialize()

    assert pipeline.doc_index is None
    assert pipeline.knowledge_index is None
