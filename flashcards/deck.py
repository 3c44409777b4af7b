"""Priority ordering of the cards in a deck.

A card's place in the deck is decided by three passes over the cards already
there, the first pass that finds a card to stand in front of winning:

1. by next review time, earliest first, only while the card is not yet due;
2. by streak, lowest first, skipped for cards in long-term memory;
3. by right rate, lowest first.

A card that beats nobody goes to the end.  The passes do not reduce to a
single sort key.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional, Sequence

from flashcards.card_state import Flashcard, now_timestamp
from flashcards.scheduler import is_long_term

logger = logging.getLogger(__name__)


def insertion_index(card: Flashcard, cards: Sequence[Flashcard], now: int) -> int:
    """Return the index at which *card* belongs among *cards* at time *now*."""

    if card.next_review_time > now:
        for index, other in enumerate(cards):
            if card.next_review_time < other.next_review_time:
                return index

    if not is_long_term(card):
        for index, other in enumerate(cards):
            if card.streak < other.streak:
                return index

    for index, other in enumerate(cards):
        if card.right_rate < other.right_rate:
            return index

    return len(cards)


class CardDeck:
    """Ordered collection of the reviewable cards of one card file.

    The header record never lives here.  Cards are held by identity, so two
    cards with identical text are still separate entries.
    """

    def __init__(self, cards: Iterable[Flashcard] = (), *, now: Optional[int] = None) -> None:
        self._cards: List[Flashcard] = []
        reference = now if now is not None else now_timestamp()
        for card in cards:
            self.insert(card, now=reference)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Flashcard]:
        return iter(list(self._cards))

    def __getitem__(self, index: int) -> Flashcard:
        return self._cards[index]

    def __contains__(self, card: object) -> bool:
        return any(existing is card for existing in self._cards)

    def __repr__(self) -> str:
        return f"CardDeck({len(self._cards)} cards)"

    @property
    def cards(self) -> List[Flashcard]:
        return list(self._cards)

    def index(self, card: Flashcard) -> int:
        for position, existing in enumerate(self._cards):
            if existing is card:
                return position
        raise ValueError(f"Card {card.summary()} is not in this deck")

    def insert(self, card: Flashcard, now: Optional[int] = None) -> int:
        """Place *card* by priority and return its new index."""

        if card.is_header:
            raise ValueError("The header record cannot join the card deck")
        if card in self:
            raise ValueError(f"Card {card.summary()} is already in this deck")
        reference = now if now is not None else now_timestamp()
        position = insertion_index(card, self._cards, reference)
        self._cards.insert(position, card)
        return position

    def remove(self, card: Flashcard) -> int:
        """Detach *card* without discarding it; return the index it held."""

        position = self.index(card)
        del self._cards[position]
        return position

    def reposition(self, card: Flashcard, now: Optional[int] = None) -> int:
        """Move *card* to the place its current statistics earn.

        The new order is built on a copy and swapped in at the end, so the
        deck holds every card at any moment a signal handler may look at it.
        """

        self.index(card)
        reference = now if now is not None else now_timestamp()
        ordered = [existing for existing in self._cards if existing is not card]
        position = insertion_index(card, ordered, reference)
        ordered.insert(position, card)
        self._cards = ordered
        return position

    def resort(self, now: Optional[int] = None) -> None:
        """Reposition every card once, in the order held before the pass."""

        reference = now if now is not None else now_timestamp()
        ordered = list(self._cards)
        for card in list(ordered):
            ordered.remove(card)
            ordered.insert(insertion_index(card, ordered, reference), card)
        self._cards = ordered
        logger.debug("Resorted %d cards", len(self._cards))


__all__ = ["CardDeck", "insertion_index"]
