"""Lesson progress: completed chapters, reading confidence and in-progress lessons."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, TypedDict

from .srs import now_ms
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

PROGRESS_KEY = "zn_progress"
STATS_KEY = "zn_reading_stats"
ACTIVE_LESSON_PREFIX = "zn_active_lesson_"


class ReadingStat(TypedDict):
    confidence: float
    timestamp: int


def _read_json(store: KeyValueStore, key: str, default: Any) -> Any:
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Ignoring unreadable value stored under %s", key)
        return default


def _write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value, ensure_ascii=False))


def load_progress(store: KeyValueStore) -> list[str]:
    return list(_read_json(store, PROGRESS_KEY, []))


def save_progress(store: KeyValueStore, completed_ids: list[str]) -> None:
    _write_json(store, PROGRESS_KEY, completed_ids)


def mark_chapter_complete(
    store: KeyValueStore,
    chapter_id: str,
    reading_confidence: float | None = None,
    *,
    now: Optional[int] = None,
) -> bool:
    """Record a finished chapter. Returns True the first time it is completed."""
    completed = load_progress(store)
    newly_completed = chapter_id not in completed
    if newly_completed:
        completed.append(chapter_id)
        save_progress(store, completed)
    if reading_confidence:
        save_reading_stats(store, chapter_id, reading_confidence, now=now)
    return newly_completed


def load_reading_stats(store: KeyValueStore) -> dict[str, ReadingStat]:
    return dict(_read_json(store, STATS_KEY, {}))


def save_reading_stats(
    store: KeyValueStore,
    chapter_id: str,
    confidence: float,
    *,
    now: Optional[int] = None,
) -> None:
    stats = load_reading_stats(store)
    stats[chapter_id] = {"confidence": confidence, "timestamp": now_ms() if now is None else now}
    _write_json(store, STATS_KEY, stats)


def average_confidence(store: KeyValueStore) -> float | None:
    values = [stat["confidence"] for stat in load_reading_stats(store).values()]
    if not values:
        return None
    return sum(values) / len(values)


def save_active_lesson(store: KeyValueStore, chapter_id: str, data: Any) -> None:
    _write_json(store, ACTIVE_LESSON_PREFIX + chapter_id, data)


def load_active_lesson(store: KeyValueStore, chapter_id: str) -> Any | None:
    return _read_json(store, ACTIVE_LESSON_PREFIX + chapter_id, None)


def active_lesson_ids(store: KeyValueStore) -> list[str]:
    return [key[len(ACTIVE_LESSON_PREFIX):] for key in store.keys(ACTIVE_LESSON_PREFIX)]


def clear_progress(store: KeyValueStore) -> None:
    """Forget completed chapters and reading stats. Active lessons are kept."""
    store.delete(PROGRESS_KEY)
    store.delete(STATS_KEY)


__all__ = [
    "ReadingStat",
    "active_lesson_ids",
    "average_confidence",
    "clear_progress",
    "load_active_lesson",
    "load_progress",
    "load_reading_stats",
    "mark_chapter_complete",
    "save_active_lesson",
    "save_progress",
    "save_reading_stats",
]
