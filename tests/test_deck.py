import pytest

from flashcards.card_state import Flashcard
from flashcards.deck import CardDeck, insertion_index

NOW = 1_000_000


def card(name, *, streak=0, rate=0.0, next_time=NOW - 1):
    return Flashcard.from_text(name, "answer").replace(
        streak=streak, right_rate=rate, next_review_time=next_time
    )


def test_card_not_yet_due_goes_before_later_reviews():
    first = card("first", next_time=NOW + 100)
    last = card("last", next_time=NOW + 300)
    middle = card("middle", next_time=NOW + 200)

    assert insertion_index(middle, [first, last], NOW) == 1


def test_due_card_ignores_review_time_and_sorts_by_streak():
    low = card("low", streak=1, next_time=NOW + 500)
    high = card("high", streak=3, next_time=NOW + 10)
    due = card("due", streak=2, next_time=NOW - 50)

    assert insertion_index(due, [low, high], NOW) == 1


def test_time_rule_falls_through_to_streak_rule():
    # Not due, but every neighbour is reviewed earlier.
    weak = card("weak", streak=0, next_time=NOW + 10)
    strong = card("strong", streak=5, next_time=NOW + 20)
    newcomer = card("new", streak=1, next_time=NOW + 99)

    assert insertion_index(newcomer, [weak, strong], NOW) == 1


def test_long_term_card_skips_streak_rule():
    veteran = card("veteran", streak=12, rate=0.2)
    fresh = card("fresh", streak=0, rate=0.9)
    promoted = card("promoted", streak=10, rate=0.5)

    assert insertion_index(promoted, [veteran, fresh], NOW) == 1

    learning = card("learning", streak=9, rate=0.5)
    assert insertion_index(learning, [veteran, fresh], NOW) == 0


def test_card_beating_nobody_is_appended():
    cards = [card("a", streak=1, rate=0.1), card("b", streak=2, rate=0.2)]
    best = card("best", streak=4, rate=0.9)

    assert insertion_index(best, cards, NOW) == 2


def test_deck_orders_cards_on_insert():
    strong = card("strong", streak=4)
    weak = card("weak", streak=0)
    deck = CardDeck([strong, weak], now=NOW)

    assert deck.cards == [weak, strong]
    assert len(deck) == 2


def test_deck_holds_cards_by_identity():
    twin_a = card("twin")
    twin_b = card("twin")
    deck = CardDeck([twin_a, twin_b], now=NOW)

    assert twin_a in deck and twin_b in deck
    deck.remove(twin_b)
    assert twin_a in deck
    assert twin_b not in deck


def test_remove_unknown_card_raises():
    deck = CardDeck([card("a")], now=NOW)

    with pytest.raises(ValueError):
        deck.remove(card("stranger"))


def test_header_and_duplicates_are_rejected():
    existing = card("a")
    deck = CardDeck([existing], now=NOW)

    with pytest.raises(ValueError):
        deck.insert(Flashcard.header("# header\n"), now=NOW)
    with pytest.raises(ValueError):
        deck.insert(existing, now=NOW)


def test_reposition_moves_card_after_its_streak_grows():
    climber = card("climber", streak=0)
    steady = card("steady", streak=2)
    deck = CardDeck([climber, steady], now=NOW)
    assert deck.index(climber) == 0

    climber.streak = 3
    assert deck.reposition(climber, now=NOW) == 1
    assert deck.cards == [steady, climber]


def test_resort_keeps_upcoming_cards_in_review_time_order():
    late = card("late", next_time=NOW + 300)
    soon = card("soon", next_time=NOW + 100)
    middle = card("middle", next_time=NOW + 200)
    deck = CardDeck([late, soon, middle], now=NOW)

    deck.resort(now=NOW)

    assert deck.cards == [soon, middle, late]


def test_resort_with_nothing_to_move_keeps_order():
    weak = card("weak", streak=0, rate=0.1)
    strong = card("strong", streak=3, rate=0.9)
    deck = CardDeck([strong, weak], now=NOW)

    deck.resort(now=NOW)

    assert deck.cards == [weak, strong]


def test_iteration_is_a_snapshot():
    first, second = card("first", streak=0), card("second", streak=1)
    deck = CardDeck([first, second], now=NOW)

    seen = []
    for entry in deck:
        seen.append(entry)
        deck.remove(entry)

    assert seen == [first, second]
    assert len(deck) == 0
