"""Dutch Deck: spaced-repetition vocabulary review."""

from .srs import (
    Flashcard,
    count_due,
    create_card,
    quality_for_rating,
    schedule_next_review,
    select_due_cards,
)

__all__ = [
    "Flashcard",
    "count_due",
    "create_card",
    "quality_for_rating",
    "schedule_next_review",
    "select_due_cards",
]
