"""Domain models for diary records and app state."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from uuid import uuid4

MIN_GOAL_KCAL = 500
MAX_GOAL_KCAL = 10000
DEFAULT_GOAL_KCAL = 2000

FAILURE_EMOJI = "⚠️"
FAILURE_PREFIX = "AI analysis failed"
FAILURE_MESSAGE_LIMIT = 100


@dataclass(frozen=True)
class FoodItem:
    """Single food extracted from a diary entry."""

    emoji: str
    name: str
    calories: int


@dataclass(frozen=True)
class DietRecord:
    """One submitted diary entry, pending or analyzed."""

    id: str
    raw_text: str
    foods: tuple[FoodItem, ...] = ()
    total_calories: int = 0
    ai_comment: str = ""
    is_analyzing: bool = True


@dataclass(frozen=True)
class AppState:
    """Immutable snapshot of the diary for the active day."""

    records: tuple[DietRecord, ...] = ()
    daily_calories: int = 0
    input_text: str = ""
    is_loading: bool = False
    max_kcal: int = DEFAULT_GOAL_KCAL
    history: Mapping[str, tuple[DietRecord, ...]] = field(default_factory=dict)


def new_placeholder(raw_text: str) -> DietRecord:
    """Create a pending record with a fresh id."""
    return DietRecord(id=uuid4().hex, raw_text=raw_text)


def complete_record(
    record: DietRecord,
    foods: Iterable[FoodItem],
    total_calories: int,
    ai_comment: str,
) -> DietRecord:
    """Return the analyzed version of a placeholder, keeping its id."""
    return replace(
        record,
        foods=tuple(foods),
        total_calories=total_calories,
        ai_comment=ai_comment,
        is_analyzing=False,
    )


def fail_record(record: DietRecord, message: str) -> DietRecord:
    """Return the failed version of a placeholder with a warning item."""
    detail = message[:FAILURE_MESSAGE_LIMIT] if message else "unknown error"
    warning = FoodItem(
        emoji=FAILURE_EMOJI,
        name=f"{FAILURE_PREFIX}: {detail}",
        calories=0,
    )
    return replace(
        record,
        foods=(warning,),
        total_calories=0,
        ai_comment="",
        is_analyzing=False,
    )


def sum_daily_calories(records: Iterable[DietRecord]) -> int:
    """Sum calories of analyzed records only."""
    return sum(record.total_calories for record in records if not record.is_analyzing)


def clamp_goal(value: int) -> int:
    """Clamp a calorie goal into the supported range."""
    return max(MIN_GOAL_KCAL, min(MAX_GOAL_KCAL, value))
