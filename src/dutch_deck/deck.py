"""Deck persistence plus the deck-level operations built on the scheduler."""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Mapping, Optional, Sequence

from .srs import DEFAULT_EASE, MIN_EASE, Flashcard, create_card, schedule_next_review
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

DECK_KEY = "zn_flashcards_deck"


def card_to_dict(card: Flashcard) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": card.id,
        "front": card.front,
        "back": card.back,
        "interval": card.interval,
        "repetition": card.repetition,
        "easeFactor": card.ease_factor,
        "nextReviewDate": card.next_review_date,
    }
    if card.source is not None:
        data["source"] = card.source
    return data


def _number(value: Any, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _whole(value: Any, default: int) -> int:
    number = _number(value, default)
    return int(number) if math.isfinite(number) else default


def card_from_dict(data: Mapping[str, Any]) -> Flashcard:
    """Build a card from its stored form.

    Scheduling values are taken as stored. Null or unreadable numbers (NaN is
    written as ``null``) fall back to a fresh-card value, and a null ease
    restarts at the floor.
    """
    return Flashcard(
        id=str(data["id"]),
        front=data["front"],
        back=data["back"],
        interval=_whole(data.get("interval"), 0),
        repetition=_whole(data.get("repetition"), 0),
        ease_factor=_number(data.get("easeFactor", DEFAULT_EASE), MIN_EASE),
        next_review_date=_whole(data.get("nextReviewDate"), 0),
        source=data.get("source"),
    )


def load_deck(store: KeyValueStore) -> list[Flashcard]:
    raw = store.get(DECK_KEY)
    if raw is None:
        return []
    try:
        items = json.loads(raw)
    except ValueError:
        logger.exception("Failed to load deck")
        return []
    if not isinstance(items, list):
        logger.error("Failed to load deck: expected a list, got %s", type(items).__name__)
        return []
    deck: list[Flashcard] = []
    for item in items:
        try:
            deck.append(card_from_dict(item))
        except (KeyError, TypeError):
            logger.warning("Skipping unreadable card in deck: %r", item)
    return deck


def save_deck(store: KeyValueStore, deck: Sequence[Flashcard]) -> None:
    store.set(DECK_KEY, json.dumps([card_to_dict(card) for card in deck], ensure_ascii=False))


def find_card(deck: Sequence[Flashcard], card_id: str) -> Optional[Flashcard]:
    return next((card for card in deck if card.id == card_id), None)


def add_card(
    deck: Sequence[Flashcard],
    front: str,
    back: str,
    source: str | None = None,
    *,
    now: Optional[int] = None,
) -> tuple[list[Flashcard], Optional[Flashcard]]:
    """Append a new card unless one with the same front already exists.

    Returns the resulting deck and the created card, or ``None`` for a duplicate.
    """
    trimmed_front = front.strip()
    trimmed_back = back.strip()
    if not trimmed_front:
        raise ValueError("front must not be empty")
    if not trimmed_back:
        raise ValueError("back must not be empty")
    if any(card.front == trimmed_front for card in deck):
        logger.info("%r is already in the deck", trimmed_front)
        return list(deck), None
    card = create_card(trimmed_front, trimmed_back, source or None, now=now)
    logger.info("Added %r to flashcards as %s", trimmed_front, card.id)
    return [*deck, card], card


def apply_review(
    deck: Sequence[Flashcard],
    card_id: str,
    quality: int,
    *,
    now: Optional[int] = None,
) -> list[Flashcard]:
    """Replace the card with ``card_id`` by its scheduled successor."""
    updated: list[Flashcard] = []
    for card in deck:
        if card.id == card_id:
            card = schedule_next_review(card, quality, now=now)
            logger.info(
                "Reviewed %s with quality %s: interval=%s ease=%.2f",
                card_id,
                quality,
                card.interval,
                card.ease_factor,
            )
        updated.append(card)
    return updated


__all__ = [
    "DECK_KEY",
    "add_card",
    "apply_review",
    "card_from_dict",
    "card_to_dict",
    "find_card",
    "load_deck",
    "save_deck",
]
