"""Tests for durable update offset storage."""

import pytest

from docbot.offset_store import OffsetStore


def test_missing_file_reads_zero(offset_store):
    assert offset_store.read() == 0


def test_write_then_read(offset_store):
    offset_store.write(123456)

    assert offset_store.read() == 123456
    assert offset_store.path.read_text(encoding="utf-8") == "123456"


def test_write_replaces_previous_value(offset_store):
    offset_store.write(1)
    offset_store.write(2)

    assert offset_store.read() == 2


def test_write_leaves_no_temporary_file(offset_store):
    offset_store.write(5)

    assert [path.name for path in offset_store.path.parent.iterdir()] == [
        offset_store.path.name
    ]


def test_write_creates_parent_directories(tmp_path):
    store = OffsetStore(tmp_path / "state" / "offset.txt")

    store.write(9)

    assert store.read() == 9


@pytest.mark.parametrize("content", ["", "abc", "12abc", "-4"])
def test_unusable_content_reads_zero(offset_store, content):
    offset_store.path.write_text(content, encoding="utf-8")

    assert offset_store.read() == 0


def test_surrounding_whitespace_is_ignored(offset_store):
    offset_store.path.write_text("  77\n", encoding="utf-8")

    assert offset_store.read() == 77


def test_negative_offset_rejected(offset_store):
    with pytest.raises(ValueError, match="non-negative"):
        offset_store.write(-1)


def test_unreadable_file_raises(tmp_path):
    store = OffsetStore(tmp_path)

    with pytest.raises(OSError):
        store.read()
