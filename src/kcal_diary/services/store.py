"""Persisted diary slots on top of a key-value store."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from kcal_diary.domain.records import DEFAULT_GOAL_KCAL, DietRecord

KEY_RECORDS = "diet_records"
KEY_MAX_KCAL = "max_kcal"
KEY_LAST_DATE = "last_date"
KEY_HISTORY = "history_records"

_logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[DietRecord])
_HISTORY = TypeAdapter(dict[str, list[DietRecord]])
_GOAL = TypeAdapter(int)


class KeyValueStore(Protocol):
    """Interface for a flat string key-value store."""

    def get(self, key: str) -> str | None:
        """Return the stored value or None when absent."""

    def set(self, key: str, value: str) -> None:
        """Overwrite a single value."""

    def set_many(self, values: Mapping[str, str]) -> None:
        """Overwrite several values in one write."""


@dataclass
class DiaryStore:
    """Typed access to the persisted diary slots.

    Missing or unreadable slots fall back to their defaults: no records, no
    history, a 2000 kcal goal and no last active date.
    """

    kv: KeyValueStore

    def load_records(self) -> list[DietRecord]:
        """Return the stored records of the active day."""
        raw = self.kv.get(KEY_RECORDS)
        if raw is None:
            return []
        try:
            return _RECORDS.validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding unreadable slot: key=%s", KEY_RECORDS)
            return []

    def load_goal(self) -> int:
        """Return the stored calorie goal."""
        raw = self.kv.get(KEY_MAX_KCAL)
        if raw is None:
            return DEFAULT_GOAL_KCAL
        try:
            return _GOAL.validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding unreadable slot: key=%s", KEY_MAX_KCAL)
            return DEFAULT_GOAL_KCAL

    def save_state(self, records: Iterable[DietRecord], max_kcal: int) -> None:
        """Persist analyzed records and the goal; pending records are skipped."""
        self.kv.set_many(
            {KEY_RECORDS: _dump_records(records), KEY_MAX_KCAL: str(max_kcal)}
        )

    def load_last_date(self) -> str | None:
        """Return the last active ISO date, if a valid one was written."""
        raw = self.kv.get(KEY_LAST_DATE)
        if raw is None:
            return None
        try:
            return date.fromisoformat(raw).isoformat()
        except ValueError:
            _logger.warning("Discarding unreadable slot: key=%s", KEY_LAST_DATE)
            return None

    def save_last_date(self, day: str) -> None:
        """Persist the last active ISO date."""
        self.kv.set(KEY_LAST_DATE, day)

    def load_history(self) -> dict[str, list[DietRecord]]:
        """Return archived records keyed by ISO date."""
        raw = self.kv.get(KEY_HISTORY)
        if raw is None:
            return {}
        try:
            return _HISTORY.validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding unreadable slot: key=%s", KEY_HISTORY)
            return {}

    def save_rollover(
        self,
        last_date: str,
        history: Mapping[str, Sequence[DietRecord]],
    ) -> None:
        """Persist a new active date with empty records and updated history."""
        self.kv.set_many(
            {
                KEY_LAST_DATE: last_date,
                KEY_RECORDS: _dump_records(()),
                KEY_HISTORY: _HISTORY.dump_json(
                    {day: list(records) for day, records in history.items()}
                ).decode("utf-8"),
            }
        )


def _dump_records(records: Iterable[DietRecord]) -> str:
    analyzed = [record for record in records if not record.is_analyzing]
    return _RECORDS.dump_json(analyzed).decode("utf-8")
