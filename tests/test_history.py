"""Tests for the bounded conversation history store."""

import pytest

from docbot.history import ConversationHistoryStore
from docbot.models import ChatMessage


def test_record_turn(history_store):
    history_store.record_turn(1, "What is a Broker ID?", "An identifier for builders.")

    assert history_store.get(1) == [
        ChatMessage(role="user", content="What is a Broker ID?"),
        ChatMessage(role="assistant", content="An identifier for builders."),
    ]


def test_history_limit_drops_oldest_first():
    store = ConversationHistoryStore(max_messages=4)
    for turn in range(3):
        store.record_turn(1, f"question {turn}", f"answer {turn}")

    history = store.get(1)
    assert len(history) == 4
    assert [message.content for message in history] == [
        "question 1",
        "answer 1",
        "question 2",
        "answer 2",
    ]


def test_odd_limit_can_start_with_assistant_message():
    store = ConversationHistoryStore(max_messages=3)
    store.record_turn(1, "q1", "a1")
    store.record_turn(1, "q2", "a2")

    assert [message.role for message in store.get(1)] == ["assistant", "user", "assistant"]


def test_zero_limit_keeps_nothing():
    store = ConversationHistoryStore(max_messages=0)
    store.record_turn(1, "q", "a")

    assert store.get(1) == []


def test_negative_limit_rejected():
    with pytest.raises(ValueError, match="non-negative"):
        ConversationHistoryStore(max_messages=-1)


def test_conversations_are_isolated(history_store):
    history_store.record_turn(1, "q1", "a1")
    history_store.record_turn(2, "q2", "a2")

    assert [m.content for m in history_store.get(1)] == ["q1", "a1"]
    assert [m.content for m in history_store.get(2)] == ["q2", "a2"]


def test_get_returns_copy(history_store):
    history_store.record_turn(1, "q", "a")

    history_store.get(1).clear()

    assert len(history_store.get(1)) == 2


def test_unknown_conversation_is_empty(history_store):
    assert history_store.get(999) == []
