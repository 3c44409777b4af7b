"""Terminal quiz loop for a review session.

Every line the user types, whether part of an answer or a y/n judgment, is
first checked against a small command vocabulary; a recognised command runs
at once and is not counted as input.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from flashcards.card_state import Flashcard
from flashcards.review_service import ReviewSession, SessionSnapshot

logger = logging.getLogger(__name__)

ANSWER_TERMINATOR = "<<<"
CLEAR_LINES = 100
ANSI_CLEAR = "\033[2J"
COMMANDS = ("help", "quit", "temp", "clear")

TEMPLATE = """\
# XXX flashcard records
# This file consists of comments (every line starting with # is a comment),
# flashcard records and blank lines.
# A record is made of a record start marker (>>), comments, blank lines, a
# question marker (Q:), the question, an answer marker (A:), the answer,
# statistics and a record end marker (<<). Comments and blank lines are
# optional. The statistics are, in order: review count, correct answers in
# a row, right rate (percent), and the encoded previous and next review
# times. Every statistics field is optional but they can only be left out
# from the end; the two times should not be entered by hand. When the file
# is updated only the header comment and the comments inside records are
# kept.

>>
[# comment]
Q:
    the question
A:
    the answer
S:
    [review count] [correct in a row] [right rate] [previous review] [next review]
<<

[more flashcard records]
"""

HELP_TEXT = """\
    Run the help command at any time to show this message.
Running a command means typing its name and pressing Enter.
Available commands:
    help      show this message
    quit      save and leave the program
    temp      show the data file template
    clear     clear the screen
"""


class _QuitRequested(Exception):
    """Raised inside the quiz loop when the user asks to leave."""


def classify_line(line: str) -> Optional[str]:
    """Return the command named by *line*, or ``None`` for literal input."""

    name = line.strip()
    return name if name in COMMANDS else None


class ConsoleQuiz:
    """Interactive question/answer loop over the due cards of a session."""

    def __init__(
        self,
        session: ReviewSession,
        *,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        ansi: bool = False,
    ) -> None:
        self.session = session
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.ansi = ansi

    # ------------------------------------------------------------------
    # Output helpers
    # ------------------------------------------------------------------
    def say(self, text: str = "", end: str = "\n") -> None:
        print(text, end=end, file=self.stdout)
        self.stdout.flush()

    def clear_screen(self) -> None:
        if self.ansi:
            self.say(ANSI_CLEAR)
        else:
            self.say("\n" * (CLEAR_LINES - 1))

    def show_help(self) -> None:
        self.say(HELP_TEXT, end="")

    def show_template(self) -> None:
        self.say(TEMPLATE, end="")

    # ------------------------------------------------------------------
    # Input helpers
    # ------------------------------------------------------------------
    def read_line(self) -> str:
        line = self.stdin.readline()
        if not line:
            logger.debug("End of input, leaving the quiz")
            raise _QuitRequested()
        return line

    def execute(self, line: str) -> bool:
        """Run the command in *line* if there is one; report whether it ran."""

        command = classify_line(line)
        if command is None:
            return False
        if command == "help":
            self.show_help()
        elif command == "quit":
            raise _QuitRequested()
        elif command == "temp":
            self.show_template()
        elif command == "clear":
            self.clear_screen()
        return True

    # ------------------------------------------------------------------
    # Quiz steps
    # ------------------------------------------------------------------
    def show_question(self, card: Flashcard) -> None:
        self.say("Question:")
        self.say(card.question or "", end="")
        self.say(f"Type your answer (finish with a line holding only {ANSWER_TERMINATOR}):")

    def read_answer(self) -> str:
        lines = []
        while True:
            line = self.read_line()
            if line.strip() == ANSWER_TERMINATOR:
                return "".join(lines)
            if not self.execute(line):
                lines.append(line)

    def show_answer(self, card: Flashcard) -> None:
        self.say("Answer:")
        self.say(card.answer or "", end="")

    def judge_answer(self) -> bool:
        while True:
            self.say("Correct? (y for right / n for wrong)")
            line = self.read_line()
            if self.execute(line):
                continue
            reply = line.strip()
            if reply == "y":
                return True
            if reply == "n":
                return False

    def show_stats(self, card: Flashcard) -> None:
        self.say(
            f"Reviewed {card.quiz_count} time(s), {card.streak} in a row, "
            f"right rate {card.right_rate * 100:g}%.\n"
        )

    def run(self) -> SessionSnapshot:
        """Quiz every due card, then save; ``quit`` or end of input saves early."""

        snapshot = self.session.snapshot()
        logger.info(
            "Starting review of %d cards (%d in long-term memory)",
            snapshot.total,
            snapshot.long_term,
        )
        self.clear_screen()
        try:
            for card in self.session.due_cards():
                self.show_question(card)
                self.read_answer()
                self.show_answer(card)
                correct = self.judge_answer()
                self.session.record_answer(card, correct)
                self.show_stats(card)
                self.clear_screen()
        except _QuitRequested:
            logger.info("Quit requested after %d answers", self.session.answered)
        self.session.persist()
        return self.session.snapshot()


__all__ = [
    "ANSWER_TERMINATOR",
    "COMMANDS",
    "ConsoleQuiz",
    "HELP_TEXT",
    "TEMPLATE",
    "classify_line",
]
