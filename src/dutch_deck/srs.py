"""SM-2 review scheduling for vocabulary flashcards.

Cards are immutable values. Every review produces a new :class:`Flashcard`
and the caller decides where to persist it (see :mod:`dutch_deck.deck`).
"""

from __future__ import annotations

import math
import secrets
import string
import time
from dataclasses import dataclass, replace
from typing import Iterable, Literal, Optional

DEFAULT_EASE = 2.5
MIN_EASE = 1.3
PASSING_QUALITY = 3
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
DAY_MS = 24 * 60 * 60 * 1000

Rating = Literal["again", "hard", "good", "easy"]

# Quality emitted by each review button. 0 and 4 are never emitted but stay valid inputs.
RATING_QUALITY: dict[str, int] = {
    "again": 1,
    "hard": 2,
    "good": 3,
    "easy": 5,
}

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 9


@dataclass(frozen=True, slots=True)
class Flashcard:
    id: str
    front: str
    back: str
    interval: int
    repetition: int
    ease_factor: float
    next_review_date: int
    source: str | None = None


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _new_card_id(timestamp: int) -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"{timestamp}{suffix}"


def create_card(front: str, back: str, source: str | None = None, *, now: Optional[int] = None) -> Flashcard:
    """Create a card that is due immediately."""
    timestamp = now_ms() if now is None else now
    return Flashcard(
        id=_new_card_id(timestamp),
        front=front,
        back=back,
        interval=0,
        repetition=0,
        ease_factor=DEFAULT_EASE,
        next_review_date=timestamp,
        source=source,
    )


def quality_for_rating(rating: str) -> int:
    """Map a review button label (again/hard/good/easy) to an SM-2 quality."""
    try:
        return RATING_QUALITY[rating.lower()]
    except KeyError:
        raise ValueError(f"Unsupported rating: {rating}") from None


def schedule_next_review(card: Flashcard, quality: int, *, now: Optional[int] = None) -> Flashcard:
    """Return the state of ``card`` after a review graded with ``quality``.

    ``quality`` is not range checked: any value >= 3 counts as a successful
    recall, anything lower is a lapse. The ease factor only moves on success
    and never drops below :data:`MIN_EASE`; a non-finite ease is treated as
    :data:`MIN_EASE` on the next success.
    """
    interval = card.interval
    repetition = card.repetition
    ease = card.ease_factor

    if quality >= PASSING_QUALITY:
        # NaN or infinite ease from a corrupted deck restarts at the floor.
        if not math.isfinite(ease):
            ease = MIN_EASE
        if repetition == 0:
            interval = FIRST_INTERVAL
        elif repetition == 1:
            interval = SECOND_INTERVAL
        else:
            interval = _round_half_up(interval * ease)
        repetition += 1
        miss = 5 - quality
        ease = max(MIN_EASE, ease + (0.1 - miss * (0.08 + miss * 0.02)))
    else:
        repetition = 0
        interval = FIRST_INTERVAL

    timestamp = now_ms() if now is None else now
    return replace(
        card,
        interval=interval,
        repetition=repetition,
        ease_factor=ease,
        next_review_date=timestamp + interval * DAY_MS,
    )


def is_due(card: Flashcard, now: int) -> bool:
    return card.next_review_date <= now


def select_due_cards(deck: Iterable[Flashcard], now: Optional[int] = None) -> list[Flashcard]:
    """Cards whose review date has passed, in deck order."""
    threshold = now_ms() if now is None else now
    return [card for card in deck if is_due(card, threshold)]


def count_due(deck: Iterable[Flashcard], now: Optional[int] = None) -> int:
    return len(select_due_cards(deck, now))


__all__ = [
    "DAY_MS",
    "DEFAULT_EASE",
    "MIN_EASE",
    "PASSING_QUALITY",
    "RATING_QUALITY",
    "Flashcard",
    "Rating",
    "count_due",
    "create_card",
    "is_due",
    "now_ms",
    "quality_for_rating",
    "schedule_next_review",
    "select_due_cards",
]
