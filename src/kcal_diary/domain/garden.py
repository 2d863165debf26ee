"""Goal progress and history summaries shown alongside the diary."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from kcal_diary.domain.records import DietRecord

BLOOM_PERCENT = 100
BUD_PERCENT = 70
LEAF_PERCENT = 30
GOAL_INPUT_MAX_DIGITS = 5
FULL_DAY_KCAL = 2000
GOOD_DAY_KCAL = 1200
LIGHT_DAY_KCAL = 500


@dataclass(frozen=True)
class GardenStage:
    """Visual stage of today's progress."""

    emoji: str
    label: str


SPROUT = GardenStage("🌱", "A sprout has appeared")
LEAF = GardenStage("🌿", "The leaves are growing")
BUD = GardenStage("🌷", "A flower bud has formed")
BLOOM = GardenStage("🌸", "Today's flower is in full bloom!")


@dataclass(frozen=True)
class GoalProgress:
    """Progress of today's calories toward the goal."""

    ratio: float
    percent: int
    stage: GardenStage


@dataclass(frozen=True)
class HistoryDay:
    """Archived day with its calorie total."""

    date: str
    total_calories: int
    emoji: str
    records: tuple[DietRecord, ...]


def goal_progress(total_calories: int, max_kcal: int) -> GoalProgress:
    """Return the clamped ratio, percent and garden stage."""
    ratio = min(max(total_calories / max_kcal, 0.0), 1.0) if max_kcal > 0 else 0.0
    percent = int(ratio * 100)
    if percent >= BLOOM_PERCENT:
        stage = BLOOM
    elif percent >= BUD_PERCENT:
        stage = BUD
    elif percent >= LEAF_PERCENT:
        stage = LEAF
    else:
        stage = SPROUT
    return GoalProgress(ratio=ratio, percent=percent, stage=stage)


def summarize_history(
    history: Mapping[str, Sequence[DietRecord]],
) -> list[HistoryDay]:
    """Return archived days newest first."""
    days = []
    for day in sorted(history, reverse=True):
        records = tuple(history[day])
        total = sum(record.total_calories for record in records)
        days.append(
            HistoryDay(
                date=day,
                total_calories=total,
                emoji=_day_emoji(total),
                records=records,
            )
        )
    return days


def parse_goal_input(raw: str) -> int | None:
    """Parse user-entered goal text, keeping up to five digits."""
    digits = "".join(char for char in raw if char.isdigit())[:GOAL_INPUT_MAX_DIGITS]
    if not digits:
        return None
    return int(digits)


def _day_emoji(total_calories: int) -> str:
    if total_calories >= FULL_DAY_KCAL:
        return "🌸"
    if total_calories >= GOOD_DAY_KCAL:
        return "🌿"
    if total_calories >= LIGHT_DAY_KCAL:
        return "🌱"
    return "🫧"
