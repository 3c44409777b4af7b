"""Review statistics and scheduling for flashcards.

Every answer feeds a cumulative running average: each historical answer
weighs the same, a correct one scoring 1 and a wrong one scoring -1.  A card
whose streak of correct answers reaches :data:`LONG_TERM_STREAK` is treated
as committed to long-term memory and is no longer quizzed.
"""

from __future__ import annotations

import calendar
import logging
import math
import time
from typing import Optional, Sequence, Union

from flashcards.card_state import BLANK_BLOCK, Flashcard, now_timestamp

logger = logging.getLogger(__name__)

LONG_TERM_STREAK = 10
STATS_FIELD_COUNT = 5
PERCENT = 100.0

Number = Union[int, float]


def is_long_term(card: Flashcard) -> bool:
    return card.streak >= LONG_TERM_STREAK


def is_due(card: Flashcard, now: Optional[int] = None) -> bool:
    current = now if now is not None else now_timestamp()
    return card.next_review_time <= current


def add_one_month(timestamp: int) -> int:
    """Return *timestamp* moved forward by one calendar month (UTC fields).

    December rolls over to January of the next year.  A day that does not
    exist in the target month spills into the following one, so 31 January
    becomes 3 March in a common year.
    """

    fields = time.gmtime(timestamp)
    year, month = fields.tm_year, fields.tm_mon + 1
    if month > 12:
        year, month = year + 1, 1
    return calendar.timegm(
        (year, month, fields.tm_mday, fields.tm_hour, fields.tm_min, fields.tm_sec)
    )


def check_stats(fields: Sequence[Number]) -> None:
    """Raise ``ValueError`` unless ``fields`` is a loadable statistics prefix."""

    if len(fields) > STATS_FIELD_COUNT:
        raise ValueError(
            f"expected at most {STATS_FIELD_COUNT} statistics fields, got {len(fields)}"
        )
    if not all(math.isfinite(value) for value in fields):
        raise ValueError("statistics fields must be finite numbers")
    if any(value < 0 for value in fields):
        raise ValueError("statistics fields must not be negative")
    if len(fields) > 2 and fields[2] > PERCENT:
        raise ValueError(f"right rate {fields[2]:g}% is above 100%")


def load_stats(card: Flashcard, fields: Sequence[Number]) -> Flashcard:
    """Assign the parsed statistics suffix ``fields`` to *card*.

    ``fields`` follows the on-disk order ``quiz_count streak right_rate
    prev_time next_time``; any trailing part may be missing and keeps its
    zero default.  ``right_rate`` is a percentage here and a fraction on the
    card.  Nothing is assigned when the fields are rejected.
    """

    check_stats(fields)
    values = list(fields) + [0] * (STATS_FIELD_COUNT - len(fields))
    quiz_count, streak, percent, prev_time, next_time = values

    card.quiz_count = int(quiz_count)
    card.streak = int(streak)
    card.right_rate = float(percent) / PERCENT
    card.prev_review_time = int(prev_time)
    card.next_review_time = int(next_time)
    return card


def fix_card(card: Flashcard, load_time: Optional[int] = None) -> Flashcard:
    """Normalise a freshly parsed card before it joins a deck."""

    load_time = load_time if load_time is not None else now_timestamp()
    if card.comment is None:
        card.comment = ""
    if card.question is None:
        card.question = BLANK_BLOCK
    if card.answer is None:
        card.answer = BLANK_BLOCK
    if card.prev_review_time == 0:
        card.prev_review_time = load_time
    card.next_review_time = add_one_month(card.prev_review_time)
    return card


def update_on_answer(card: Flashcard, correct: bool) -> Flashcard:
    """Fold one answer into the card's streak and running-average right rate."""

    previous_count = card.quiz_count
    rate = card.right_rate
    card.quiz_count = previous_count + 1

    if correct:
        card.streak += 1
        card.right_rate = (rate * previous_count + 1.0) / card.quiz_count
    else:
        card.streak = 0
        if rate > 0:
            card.right_rate = max(0.0, (rate * previous_count - 1.0) / card.quiz_count)
        else:
            card.right_rate = 0.0

    if card.streak == LONG_TERM_STREAK:
        logger.info("Card %s reached long-term memory", card.summary())
    return card


def reschedule(card: Flashcard, review_time: Optional[int] = None) -> Flashcard:
    """Stamp *review_time* as the latest review and plan the next one a month later."""

    card.prev_review_time = review_time if review_time is not None else now_timestamp()
    card.next_review_time = add_one_month(card.prev_review_time)
    return card


__all__ = [
    "LONG_TERM_STREAK",
    "STATS_FIELD_COUNT",
    "add_one_month",
    "check_stats",
    "fix_card",
    "is_due",
    "is_long_term",
    "load_stats",
    "reschedule",
    "update_on_answer",
]
