"""Reading and writing the plain-text card file.

A card file is a header comment followed by record blocks::

    # header comment

    >>
    # card comment
    Q:
    question text
    A:
    answer text
    S:
        <quiz_count> <streak> <right_rate%> <prev_time> <next_time>
    <<

Statistics may be cut short from the end.  Comments survive a save only in
the header and between ``>>`` and ``Q:``.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

import pandas as pd

from flashcards.card_state import Flashcard, now_timestamp
from flashcards.deck import CardDeck
from flashcards.errors import DataFileError, MalformedRecordError
from flashcards.scheduler import STATS_FIELD_COUNT, check_stats, fix_card, load_stats

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Markers and constants
# ---------------------------------------------------------------------------
RECORD_START = ">>"
RECORD_END = "<<"
QUESTION_MARKER = "Q:"
ANSWER_MARKER = "A:"
STATS_MARKER = "S:"
COMMENT_PREFIX = "#"
STATS_INDENT = "    "
ENCODING = "utf-8"
SPREADSHEET_SUFFIXES = {".csv", ".xls", ".xlsx"}

_STAGE_MARKERS = {
    QUESTION_MARKER: "question",
    ANSWER_MARKER: "answer",
    STATS_MARKER: "stats",
}

PathLike = Union[str, Path]


@dataclass
class CardFile:
    """Header record plus the priority-ordered deck of one data file."""

    header: Flashcard = field(default_factory=Flashcard.header)
    deck: CardDeck = field(default_factory=CardDeck)

    def __len__(self) -> int:
        return len(self.deck)

    def add(self, card: Flashcard, load_time: Optional[int] = None) -> int:
        """Normalise a new card and insert it by priority."""

        load_time = load_time if load_time is not None else now_timestamp()
        fix_card(card, load_time)
        return self.deck.insert(card, now=load_time)

    def extend(self, cards: Iterable[Flashcard], load_time: Optional[int] = None) -> int:
        load_time = load_time if load_time is not None else now_timestamp()
        count = 0
        for card in cards:
            self.add(card, load_time)
            count += 1
        return count


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _stage_marker(line: str) -> Optional[str]:
    return _STAGE_MARKERS.get(line.rstrip())


def parse_stats_line(line: str) -> List[Union[int, float]]:
    """Split a statistics line into numbers, the third one being a float."""

    values: List[Union[int, float]] = []
    for position, token in enumerate(line.split()):
        if position == 2:
            values.append(float(token))
        else:
            values.append(int(token))
    return values


def leading_stats_fields(line: str) -> List[Union[int, float]]:
    """Return the longest run of leading fields on *line* that loads cleanly."""

    tokens = line.split()[:STATS_FIELD_COUNT]
    for end in range(len(tokens), 0, -1):
        try:
            fields = parse_stats_line(" ".join(tokens[:end]))
            check_stats(fields)
        except ValueError:
            continue
        return fields
    return []


def parse_card_text(
    text: str,
    load_time: Optional[int] = None,
    *,
    strict: bool = False,
) -> CardFile:
    """Build a :class:`CardFile` from the text of a data file.

    With ``strict`` unset, malformed blocks are logged and left out of the
    result, and a card with a bad statistics line keeps its text and the
    leading fields that load; otherwise the first problem raises
    :class:`MalformedRecordError`.
    """

    load_time = load_time if load_time is not None else now_timestamp()
    header_lines: List[str] = []
    card_file = CardFile()

    current: Optional[Flashcard] = None
    opened_at = 0
    stage: Optional[str] = None
    stats_seen = False
    any_opened = False

    def malformed(message: str, line_number: int) -> None:
        if strict:
            raise MalformedRecordError(message, line_number)
        logger.warning("Skipping malformed input at line %d: %s", line_number, message)

    line_number = 0
    for line_number, line in enumerate(io.StringIO(text), start=1):
        if line.startswith(RECORD_START):
            if current is not None:
                malformed(
                    f"record opened at line {opened_at} has no closing {RECORD_END}",
                    line_number,
                )
            current = Flashcard(comment="")
            opened_at = line_number
            stage, stats_seen = None, False
            any_opened = True
        elif line.startswith(RECORD_END):
            if current is None:
                malformed(f"{RECORD_END} outside of a record", line_number)
            else:
                card_file.add(current, load_time)
            current, stage = None, None
        elif _stage_marker(line) is not None:
            if current is None:
                malformed(f"{line.rstrip()} outside of a record", line_number)
            else:
                stage = _stage_marker(line)
        elif current is None:
            if line.startswith(COMMENT_PREFIX) and not any_opened:
                header_lines.append(line)
        elif stage is None:
            if line.startswith(COMMENT_PREFIX):
                current.comment += line
        elif stage == "question":
            current.question = (current.question or "") + line
        elif stage == "answer":
            current.answer = (current.answer or "") + line
        elif stage == "stats" and not stats_seen and line.strip():
            stats_seen = True
            try:
                load_stats(current, parse_stats_line(line))
            except ValueError as exc:
                message = f"bad statistics line {line.strip()!r} ({exc})"
                if strict:
                    raise MalformedRecordError(message, line_number) from exc
                fields = leading_stats_fields(line)
                load_stats(current, fields)
                logger.warning(
                    "Keeping the first %d statistics fields at line %d: %s",
                    len(fields),
                    line_number,
                    message,
                )

    if current is not None:
        malformed(
            f"record opened at line {opened_at} has no closing {RECORD_END}",
            line_number,
        )

    card_file.header.comment = "".join(header_lines)
    logger.debug("Parsed %d cards from %d lines", len(card_file.deck), line_number)
    return card_file


def load_card_file(
    path: PathLike,
    load_time: Optional[int] = None,
    *,
    strict: bool = False,
) -> CardFile:
    data_path = Path(path)
    try:
        with data_path.open("r", encoding=ENCODING) as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise DataFileError(data_path, f"cannot read data file ({exc.__class__.__name__})") from exc
    card_file = parse_card_text(text, load_time, strict=strict)
    logger.info("Loaded %d cards from %s", len(card_file), data_path)
    return card_file


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------

def _terminated(block: Optional[str]) -> str:
    if not block:
        return ""
    return block if block.endswith("\n") else block + "\n"


def format_stats_line(card: Flashcard) -> str:
    quiz_count, streak, percent, prev_time, next_time = card.stats_fields()
    return (
        f"{STATS_INDENT}{quiz_count:d} {streak:d} {percent:g} "
        f"{max(prev_time, 0):d} {max(next_time, 0):d}\n"
    )


def serialize_card_file(card_file: CardFile) -> str:
    """Render *card_file* in its current deck order."""

    parts = [_terminated(card_file.header.comment)]
    for card in card_file.deck:
        parts.extend(
            [
                "\n",
                f"{RECORD_START}\n",
                _terminated(card.comment),
                f"{QUESTION_MARKER}\n",
                _terminated(card.question) or "\n",
                f"{ANSWER_MARKER}\n",
                _terminated(card.answer) or "\n",
                f"{STATS_MARKER}\n",
                format_stats_line(card),
                f"{RECORD_END}\n",
            ]
        )
    return "".join(parts)


def save_card_file(path: PathLike, card_file: CardFile) -> None:
    """Write *card_file* to *path*, replacing the old file in one step."""

    data_path = Path(path)
    text = serialize_card_file(card_file)
    temp_name: Optional[str] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=ENCODING,
            dir=data_path.parent,
            prefix=f".{data_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            temp_name = handle.name
            handle.write(text)
        os.replace(temp_name, data_path)
    except OSError as exc:
        raise DataFileError(data_path, f"cannot write data file ({exc.__class__.__name__})") from exc
    finally:
        if temp_name is not None and os.path.exists(temp_name):
            os.unlink(temp_name)
    logger.info("Saved %d cards to %s", len(card_file), data_path)


# ---------------------------------------------------------------------------
# Spreadsheet import
# ---------------------------------------------------------------------------

def _column_key(name: object) -> str:
    return str(name).strip().rstrip(":").lower()


def import_spreadsheet(path: PathLike) -> List[Flashcard]:
    """Read question/answer rows from a spreadsheet into new cards.

    Columns named ``Question`` and ``Answer`` (a trailing colon and letter
    case are ignored) are used when present, otherwise the first two columns.
    An optional ``Comment`` column becomes the card comment.  Reading stops at
    the first row without a question.
    """

    sheet_path = Path(path)
    if not sheet_path.exists():
        raise DataFileError(sheet_path, "spreadsheet not found")
    if sheet_path.suffix.lower() not in SPREADSHEET_SUFFIXES:
        raise DataFileError(sheet_path, "unsupported spreadsheet type")

    try:
        if sheet_path.suffix.lower() == ".csv":
            frame = pd.read_csv(sheet_path, dtype=str, encoding=ENCODING)
        else:
            frame = pd.read_excel(sheet_path, dtype=str)
    except (OSError, ValueError, ImportError) as exc:
        raise DataFileError(sheet_path, f"cannot read spreadsheet ({exc})") from exc

    columns = {_column_key(name): name for name in frame.columns}
    question_col = columns.get("question")
    answer_col = columns.get("answer")
    if question_col is None or answer_col is None:
        if len(frame.columns) < 2:
            raise DataFileError(sheet_path, "spreadsheet needs a question and an answer column")
        question_col, answer_col = frame.columns[0], frame.columns[1]
    comment_col = columns.get("comment")

    cards: List[Flashcard] = []
    for _, row in frame.iterrows():
        question = row.get(question_col)
        if pd.isna(question) or not str(question).strip():
            break
        answer = row.get(answer_col)
        comment = row.get(comment_col) if comment_col is not None else None
        cards.append(
            Flashcard.from_text(
                question,
                "" if pd.isna(answer) else answer,
                "" if comment is None or pd.isna(comment) else comment,
            )
        )
    logger.info("Imported %d cards from %s", len(cards), sheet_path)
    return cards


__all__ = [
    "CardFile",
    "format_stats_line",
    "import_spreadsheet",
    "leading_stats_fields",
    "load_card_file",
    "parse_card_text",
    "parse_stats_line",
    "save_card_file",
    "serialize_card_file",
]
