"""Tests for diary record helpers."""

from kcal_diary.domain.records import (
    DietRecord,
    FoodItem,
    clamp_goal,
    complete_record,
    fail_record,
    new_placeholder,
    sum_daily_calories,
)


def test_new_placeholder_is_pending_and_empty() -> None:
    record = new_placeholder("toast and coffee")

    assert record.is_analyzing
    assert record.raw_text == "toast and coffee"
    assert record.foods == ()
    assert record.total_calories == 0
    assert record.ai_comment == ""


def test_new_placeholder_ids_are_unique() -> None:
    ids = {new_placeholder("x").id for _ in range(50)}

    assert len(ids) == 50


def test_complete_record_keeps_identity() -> None:
    placeholder = new_placeholder("toast")
    done = complete_record(
        placeholder,
        foods=[FoodItem("🍞", "toast", 100)],
        total_calories=100,
        ai_comment="nice",
    )

    assert done.id == placeholder.id
    assert done.raw_text == placeholder.raw_text
    assert done.foods == (FoodItem("🍞", "toast", 100),)
    assert not done.is_analyzing


def test_fail_record_truncates_message() -> None:
    placeholder = new_placeholder("toast")
    failed = fail_record(placeholder, "x" * 250)

    assert failed.id == placeholder.id
    assert not failed.is_analyzing
    assert failed.total_calories == 0
    assert len(failed.foods) == 1
    warning = failed.foods[0]
    assert warning.emoji == "⚠️"
    assert warning.calories == 0
    assert warning.name == "AI analysis failed: " + "x" * 100


def test_fail_record_with_blank_message_uses_unknown_error() -> None:
    failed = fail_record(new_placeholder("toast"), "")

    assert failed.foods[0].name == "AI analysis failed: unknown error"


def test_sum_daily_calories_skips_pending_records() -> None:
    records = [
        DietRecord(id="a", raw_text="a", total_calories=300, is_analyzing=False),
        DietRecord(id="b", raw_text="b", total_calories=999, is_analyzing=True),
        DietRecord(id="c", raw_text="c", total_calories=150, is_analyzing=False),
    ]

    assert sum_daily_calories(records) == 450


def test_clamp_goal_bounds() -> None:
    assert clamp_goal(50) == 500
    assert clamp_goal(99999) == 10000
    assert clamp_goal(1800) == 1800
