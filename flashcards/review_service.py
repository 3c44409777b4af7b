"""High level helpers that drive a review session over one card file."""

from __future__ import annotations

import logging
import signal
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, Optional, Sequence, Union

from flashcards.card_file import CardFile, load_card_file, save_card_file
from flashcards.card_state import Flashcard, format_timestamp, now_timestamp
from flashcards.deck import CardDeck
from flashcards.errors import EmptyStoreError
from flashcards.scheduler import is_due, is_long_term, reschedule, update_on_answer

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@dataclass
class SessionSnapshot:
    total: int
    long_term: int
    due_now: int
    answered: int

    @property
    def active(self) -> int:
        return self.total - self.long_term


class ReviewSession:
    """Own the cards of one data file from load until the final save."""

    def __init__(self, path: Union[str, Path], card_file: CardFile) -> None:
        self.path = Path(path)
        self.card_file = card_file
        self.answered = 0
        self._order_settled = False

    @classmethod
    def open(
        cls,
        path: Union[str, Path],
        *,
        now: Optional[int] = None,
        strict: bool = False,
        extra_cards: Iterable[Flashcard] = (),
    ) -> "ReviewSession":
        """Load *path*, add any *extra_cards*, and refuse an empty store."""

        load_time = now if now is not None else now_timestamp()
        card_file = load_card_file(path, load_time, strict=strict)
        imported = card_file.extend(extra_cards, load_time)
        if imported:
            logger.info("Added %d imported cards", imported)
        if not len(card_file):
            raise EmptyStoreError(path)
        return cls(path, card_file)

    @property
    def header(self) -> Flashcard:
        return self.card_file.header

    @property
    def deck(self) -> CardDeck:
        return self.card_file.deck

    def snapshot(self, now: Optional[int] = None) -> SessionSnapshot:
        current = now if now is not None else now_timestamp()
        cards = self.deck.cards
        return SessionSnapshot(
            total=len(cards),
            long_term=sum(1 for card in cards if is_long_term(card)),
            due_now=sum(1 for card in cards if is_due(card, current)),
            answered=self.answered,
        )

    def due_cards(self) -> Iterator[Flashcard]:
        """Yield the cards to quiz, in the order they hold when iteration starts.

        Cards in long-term memory are skipped, including ones that get there
        while the iteration is running.  Each call starts a fresh pass.
        """

        for card in self.deck.cards:
            if card in self.deck and not is_long_term(card):
                yield card

    def record_answer(
        self,
        card: Flashcard,
        correct: bool,
        now: Optional[int] = None,
    ) -> Flashcard:
        """Apply one judged answer to *card* and move it to its new place."""

        if card not in self.deck:
            raise ValueError(f"Card {card.summary()} does not belong to {self.path}")
        review_time = now if now is not None else now_timestamp()
        update_on_answer(card, correct)
        reschedule(card, review_time)
        position = self.deck.reposition(card, now=review_time)
        self.answered += 1
        self._order_settled = False
        self.header.quiz_count += 1
        logger.debug(
            "Answer %s for %s, now at position %d, next review %s",
            "right" if correct else "wrong",
            card.summary(),
            position,
            format_timestamp(card.next_review_time),
        )
        return card

    def persist(self, now: Optional[int] = None) -> None:
        """Resort the deck and write it back to the data file.

        The resort pass is skipped when no answer came in since the last
        one, so saving twice in a row writes the same bytes.
        """

        if not self._order_settled:
            self.deck.resort(now=now)
            self._order_settled = True
        save_card_file(self.path, self.card_file)


def install_shutdown_handler(
    session: ReviewSession,
    signals: Sequence[int] = DEFAULT_SHUTDOWN_SIGNALS,
    *,
    on_exit: Optional[Callable[[], None]] = None,
) -> Dict[int, object]:
    """Save *session* and exit successfully when one of *signals* arrives.

    Returns the handlers that were replaced, keyed by signal number.
    """

    def _handle(signum, frame):
        for other in previous:
            signal.signal(other, signal.SIG_IGN)
        logger.info("Received signal %d, saving %s", signum, session.path)
        session.persist()
        if on_exit is not None:
            on_exit()
        sys.exit(0)

    previous: Dict[int, object] = {}
    for signum in signals:
        try:
            previous[signum] = signal.signal(signum, _handle)
        except (OSError, ValueError) as exc:
            logger.warning("Cannot install handler for signal %d: %s", signum, exc)
    return previous


__all__ = [
    "ReviewSession",
    "SessionSnapshot",
    "install_shutdown_handler",
]
