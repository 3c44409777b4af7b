"""Domain model for a single flashcard record.

This module defines :class:`Flashcard`, a dataclass that stores the text
blocks and review statistics of one card.  The same class also represents the
header of a card file: the header only carries the file-level comment and has
no question or answer text.

Timestamps are kept as whole seconds since the epoch, matching the values
written to the data file.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Optional

BLANK_BLOCK = "\n"


def now_timestamp() -> int:
    return int(time.time())


def format_timestamp(value: int) -> str:
    """Render *value* as a UTC date for log and console messages."""

    if not value:
        return "never"
    return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


@dataclass(eq=False)
class Flashcard:
    """State container for a single flashcard.

    Parameters
    ----------
    comment:
        ``#`` lines kept verbatim between ``>>`` and ``Q:``.
    question / answer:
        Text blocks, newline terminated.  ``None`` marks the header record.
    quiz_count:
        Number of review attempts.
    streak:
        Consecutive correct answers since the last miss.
    right_rate:
        Running-average accuracy as a fraction in ``[0, 1]``.
    prev_review_time / next_review_time:
        Seconds since the epoch, ``0`` when unset.
    """

    comment: str = ""
    question: Optional[str] = None
    answer: Optional[str] = None
    quiz_count: int = 0
    streak: int = 0
    right_rate: float = 0.0
    prev_review_time: int = 0
    next_review_time: int = 0

    def __post_init__(self) -> None:
        if self.comment is None:
            self.comment = ""
        if self.right_rate < 0:
            self.right_rate = 0.0

    @classmethod
    def header(cls, comment: str = "") -> "Flashcard":
        """Create the pseudo-record that anchors a card file."""

        return cls(comment=comment)

    @classmethod
    def from_text(
        cls,
        question: Any,
        answer: Any,
        comment: Any = "",
    ) -> "Flashcard":
        """Construct a card from loose text, terminating each block with a newline."""

        return cls(
            comment=_as_comment(comment),
            question=_as_block(question),
            answer=_as_block(answer),
        )

    @property
    def is_header(self) -> bool:
        return self.question is None and self.answer is None

    def stats_fields(self) -> tuple:
        """Return the five statistics in on-disk order, rate as a percentage."""

        return (
            self.quiz_count,
            self.streak,
            self.right_rate * 100.0,
            self.prev_review_time,
            self.next_review_time,
        )

    def summary(self) -> str:
        first_line = (self.question or "").strip().splitlines()
        title = first_line[0] if first_line else "<empty question>"
        return f"{title!r} ({self.quiz_count} reviews, streak {self.streak})"

    def replace(self, **changes: Any) -> "Flashcard":
        """Return a new instance with *changes* applied."""

        return replace(self, **changes)


def _as_block(value: Any) -> str:
    if value is None:
        return BLANK_BLOCK
    text = str(value)
    if not text.strip():
        return BLANK_BLOCK
    return text if text.endswith("\n") else text + "\n"


def _as_comment(value: Any) -> str:
    if value in (None, ""):
        return ""
    lines = []
    for line in str(value).splitlines():
        lines.append(line if line.startswith("#") else f"# {line}")
    return "\n".join(lines) + "\n"


__all__ = [
    "BLANK_BLOCK",
    "Flashcard",
    "format_timestamp",
    "now_timestamp",
]
