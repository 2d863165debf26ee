"""Day rollover: archive the previous day's records into history."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date

from kcal_diary.domain.records import DietRecord


@dataclass(frozen=True)
class RolloverResult:
    """Outcome of comparing the stored active date with today."""

    records: tuple[DietRecord, ...]
    history: dict[str, tuple[DietRecord, ...]]
    last_active_date: str
    archived: bool
    needs_date_write: bool
    overwrote_existing: bool = False


def roll_over(
    today: date,
    last_active_date: str | None,
    stored_records: Sequence[DietRecord],
    history: Mapping[str, Sequence[DietRecord]],
) -> RolloverResult:
    """Compute the records and history for a new session.

    A missing ``last_active_date`` is treated as today (first run). When the
    date advanced, stored records move to ``history[last_active_date]`` and
    the active list starts empty; an existing entry under that key is
    replaced. When the stored date lies in the future (clock moved back),
    nothing is archived and the records stay on the active day.
    """
    today_key = today.isoformat()
    next_history = {key: tuple(value) for key, value in history.items()}
    records = tuple(stored_records)

    if last_active_date is None or last_active_date == today_key:
        return RolloverResult(
            records=records,
            history=next_history,
            last_active_date=today_key,
            archived=False,
            needs_date_write=last_active_date is None,
        )

    if last_active_date > today_key:
        return RolloverResult(
            records=records,
            history=next_history,
            last_active_date=today_key,
            archived=False,
            needs_date_write=True,
        )

    overwrote = False
    if records:
        overwrote = last_active_date in next_history
        next_history[last_active_date] = records
    return RolloverResult(
        records=(),
        history=next_history,
        last_active_date=today_key,
        archived=True,
        needs_date_write=True,
        overwrote_existing=overwrote,
    )
