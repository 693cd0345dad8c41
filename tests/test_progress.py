"""Tests for progress.py: chapters, reading confidence and active lessons."""

from __future__ import annotations

import pytest

from dutch_deck import progress
from dutch_deck.storage import MemoryStore


@pytest.fixture()
def store():
    return MemoryStore()


def test_progress_starts_empty(store):
    assert progress.load_progress(store) == []
    assert progress.average_confidence(store) is None


def test_mark_chapter_complete_once(store):
    assert progress.mark_chapter_complete(store, "p1-grammar-1") is True
    assert progress.mark_chapter_complete(store, "p1-grammar-1") is False
    assert progress.load_progress(store) == ["p1-grammar-1"]


def test_reading_confidence_is_recorded_on_completion(store):
    progress.mark_chapter_complete(store, "p2-reading-1", reading_confidence=4, now=123)

    assert progress.load_reading_stats(store) == {"p2-reading-1": {"confidence": 4, "timestamp": 123}}


def test_zero_confidence_is_not_recorded(store):
    progress.mark_chapter_complete(store, "p2-reading-1", reading_confidence=0)
    assert progress.load_reading_stats(store) == {}


def test_average_confidence(store):
    progress.save_reading_stats(store, "a", 2)
    progress.save_reading_stats(store, "b", 5)
    progress.save_reading_stats(store, "b", 4)

    assert progress.average_confidence(store) == pytest.approx(3.0)


def test_active_lesson_round_trip(store):
    data = {"text": "Beste collega,", "feedback": None}

    progress.save_active_lesson(store, "p1-writing-1", data)

    assert progress.load_active_lesson(store, "p1-writing-1") == data
    assert progress.load_active_lesson(store, "p1-listening-1") is None
    assert progress.active_lesson_ids(store) == ["p1-writing-1"]


def test_clear_progress_keeps_active_lessons(store):
    progress.mark_chapter_complete(store, "p2-reading-1", reading_confidence=3)
    progress.save_active_lesson(store, "p2-reading-1", {"step": 2})

    progress.clear_progress(store)

    assert progress.load_progress(store) == []
    assert progress.load_reading_stats(store) == {}
    assert progress.load_active_lesson(store, "p2-reading-1") == {"step": 2}


def test_unreadable_value_is_ignored(store):
    store.set(progress.PROGRESS_KEY, "[oops")
    assert progress.load_progress(store) == []
