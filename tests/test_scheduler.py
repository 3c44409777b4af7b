import calendar

import pytest

from flashcards.card_state import BLANK_BLOCK, Flashcard
from flashcards.scheduler import (
    LONG_TERM_STREAK,
    add_one_month,
    fix_card,
    is_due,
    is_long_term,
    load_stats,
    reschedule,
    update_on_answer,
)

from conftest import LOAD_TIME, NEXT_MONTH


def make_card(quiz_count=4, streak=2, right_rate=0.75):
    return Flashcard.from_text("question", "answer").replace(
        quiz_count=quiz_count, streak=streak, right_rate=right_rate
    )


def test_add_one_month_keeps_time_of_day():
    assert add_one_month(LOAD_TIME) == NEXT_MONTH


def test_add_one_month_rolls_december_into_next_year():
    december = calendar.timegm((2023, 12, 5, 8, 30, 0))
    assert add_one_month(december) == calendar.timegm((2024, 1, 5, 8, 30, 0))


def test_add_one_month_spills_missing_days_forward():
    end_of_january = calendar.timegm((2023, 1, 31, 0, 0, 0))
    assert add_one_month(end_of_january) == calendar.timegm((2023, 3, 3, 0, 0, 0))


def test_load_stats_accepts_a_suffix_and_converts_percent():
    card = load_stats(Flashcard(), [4, 2, 75])

    assert card.quiz_count == 4
    assert card.streak == 2
    assert card.right_rate == pytest.approx(0.75)
    assert card.prev_review_time == 0
    assert card.next_review_time == 0


def test_load_stats_reads_all_five_fields():
    card = load_stats(Flashcard(), [7, 1, 50.5, LOAD_TIME, NEXT_MONTH])

    assert card.right_rate == pytest.approx(0.505)
    assert card.prev_review_time == LOAD_TIME
    assert card.next_review_time == NEXT_MONTH


@pytest.mark.parametrize(
    "fields",
    [
        [1, 2, 3, 4, 5, 6],
        [1, -2],
        [1, 2, 150],
    ],
)
def test_load_stats_rejects_bad_fields(fields):
    with pytest.raises(ValueError):
        load_stats(Flashcard(), fields)


def test_fix_card_fills_missing_text_and_times():
    card = fix_card(Flashcard(comment=""), LOAD_TIME)

    assert card.question == BLANK_BLOCK
    assert card.answer == BLANK_BLOCK
    assert card.comment == ""
    assert card.prev_review_time == LOAD_TIME
    assert card.next_review_time == NEXT_MONTH


def test_fix_card_keeps_existing_previous_review():
    earlier = calendar.timegm((2022, 6, 1, 0, 0, 0))
    card = fix_card(Flashcard.from_text("q", "a").replace(prev_review_time=earlier), LOAD_TIME)

    assert card.prev_review_time == earlier
    assert card.next_review_time == calendar.timegm((2022, 7, 1, 0, 0, 0))


def test_correct_answer_updates_running_average():
    card = update_on_answer(make_card(), True)

    assert card.quiz_count == 5
    assert card.streak == 3
    assert card.right_rate * 100 == pytest.approx(80)


def test_wrong_answer_resets_streak_and_lowers_rate():
    card = update_on_answer(make_card(), False)

    assert card.quiz_count == 5
    assert card.streak == 0
    assert card.right_rate * 100 == pytest.approx(40)


def test_wrong_answer_on_zero_rate_stays_zero():
    card = update_on_answer(make_card(quiz_count=3, streak=0, right_rate=0.0), False)

    assert card.right_rate == 0.0
    assert card.quiz_count == 4


def test_wrong_answer_never_goes_negative():
    card = update_on_answer(make_card(quiz_count=1, streak=1, right_rate=0.1), False)

    assert card.right_rate == 0.0


@pytest.mark.parametrize(
    "answers",
    [
        [False] * 6,
        [True, False, False, False, True, False],
        [True, True, False, True, False, False, False],
    ],
)
def test_right_rate_is_never_negative(answers):
    card = make_card(quiz_count=0, streak=0, right_rate=0.0)
    for correct in answers:
        update_on_answer(card, correct)
        assert card.right_rate >= 0.0
        if not correct:
            assert card.streak == 0


def test_long_term_memory_needs_ten_in_a_row():
    card = make_card(quiz_count=0, streak=0, right_rate=0.0)
    for _ in range(LONG_TERM_STREAK - 1):
        update_on_answer(card, True)
    assert not is_long_term(card)

    update_on_answer(card, False)
    for _ in range(LONG_TERM_STREAK - 1):
        update_on_answer(card, True)
    assert not is_long_term(card)

    update_on_answer(card, True)
    assert card.streak == LONG_TERM_STREAK
    assert is_long_term(card)


def test_reschedule_moves_both_review_times():
    card = reschedule(make_card(), LOAD_TIME)

    assert card.prev_review_time == LOAD_TIME
    assert card.next_review_time == NEXT_MONTH
    assert not is_due(card, LOAD_TIME)
    assert is_due(card, NEXT_MONTH)
