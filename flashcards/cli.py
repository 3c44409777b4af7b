"""Command line entry point: review the cards of one data file."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from flashcards.card_file import import_spreadsheet
from flashcards.card_state import Flashcard
from flashcards.console import TEMPLATE, ConsoleQuiz
from flashcards.errors import FlashcardError
from flashcards.review_service import ReviewSession, install_shutdown_handler

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s: %(message)s"


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that shows the data file template on usage errors."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        sys.stderr.write("The data file has this format:\n")
        sys.stderr.write(TEMPLATE)
        self.exit(2, f"{self.prog}: error: {message}\n")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = _ArgumentParser(
        prog="flashcards",
        description="Quiz yourself on the flashcards stored in a plain-text data file.",
    )
    parser.add_argument(
        "data_file",
        type=Path,
        help="Card file to review; it is rewritten with updated statistics on exit.",
    )
    parser.add_argument(
        "--import",
        dest="import_sheet",
        type=Path,
        metavar="SHEET",
        help="Add the question/answer rows of a .csv/.xlsx sheet before reviewing.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Stop on malformed records instead of skipping them.",
    )
    parser.add_argument(
        "--ansi",
        action="store_true",
        help="Clear the screen with an ANSI escape sequence instead of blank lines.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debugging details to stderr.",
    )
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        extra_cards: List[Flashcard] = []
        if args.import_sheet is not None:
            extra_cards = import_spreadsheet(args.import_sheet)
        session = ReviewSession.open(
            args.data_file,
            strict=args.strict,
            extra_cards=extra_cards,
        )
        install_shutdown_handler(session)
        snapshot = ConsoleQuiz(session, ansi=args.ansi).run()
    except FlashcardError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.debug("Session finished: %s", snapshot)
    print(
        f"Answered {snapshot.answered} question(s); "
        f"{snapshot.long_term} of {snapshot.total} cards are in long-term memory."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
