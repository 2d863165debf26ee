"""Diary lifecycle service: submissions, analysis results and day rollover."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date

from kcal_diary.domain.analysis import AnalysisError
from kcal_diary.domain.records import (
    AppState,
    DietRecord,
    FoodItem,
    clamp_goal,
    complete_record,
    fail_record,
    new_placeholder,
    sum_daily_calories,
)
from kcal_diary.domain.rollover import roll_over
from kcal_diary.services.analysis import AnalysisService
from kcal_diary.services.store import DiaryStore

_logger = logging.getLogger(__name__)

StateListener = Callable[[AppState], None]


@dataclass
class DiaryService:
    """Owns the diary state for one session.

    Every state change goes through ``_commit``, which reads the current
    snapshot, builds the next one and stores it without suspending, so
    analysis completions never interleave on the event loop. Analysis runs
    in background tasks; results are matched back to their placeholder by
    id and ignored when the record was deleted meanwhile.
    """

    store: DiaryStore
    analysis_service: AnalysisService
    today: Callable[[], date] = date.today
    _state: AppState = field(default_factory=AppState, init=False)
    _started: bool = field(default=False, init=False)
    _pending: int = field(default=0, init=False)
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, init=False)
    _listeners: list[StateListener] = field(default_factory=list, init=False)

    @property
    def state(self) -> AppState:
        """Return the current state snapshot."""
        return self._state

    def subscribe(self, listener: StateListener) -> None:
        """Register a callback invoked with every new state."""
        self._listeners.append(listener)

    def start(self) -> AppState:
        """Restore persisted state, archiving the previous day if needed."""
        if self._started:
            return self._state
        today = self.today()
        max_kcal = self.store.load_goal()
        history = self.store.load_history()
        last_date = self.store.load_last_date()
        result = roll_over(today, last_date, self.store.load_records(), history)

        if result.archived:
            if result.overwrote_existing:
                _logger.warning("Replacing archived records: date=%s", last_date)
            _logger.info(
                "Rolled over diary: from=%s to=%s archived_days=%s",
                last_date,
                result.last_active_date,
                len(result.history),
            )
            self.store.save_rollover(result.last_active_date, result.history)
        elif result.needs_date_write:
            self.store.save_last_date(result.last_active_date)

        self._state = AppState(
            records=result.records,
            daily_calories=sum_daily_calories(result.records),
            max_kcal=max_kcal,
            history=result.history,
        )
        self._started = True
        self._notify()
        return self._state

    def set_input(self, text: str) -> AppState:
        """Update the unsent draft text."""
        self._ensure_started()
        return self._commit(
            lambda state: replace(state, input_text=text), persist=False
        )

    async def submit(self, text: str | None = None) -> DietRecord | None:
        """Add a pending record and start analyzing it in the background.

        Uses the current draft when ``text`` is omitted. Blank text is
        ignored.
        """
        self._ensure_started()
        cleaned = (self._state.input_text if text is None else text).strip()
        if not cleaned:
            return None
        placeholder = new_placeholder(cleaned)
        self._pending += 1
        self._commit(
            lambda state: replace(
                state,
                records=(placeholder, *state.records),
                input_text="",
            ),
            persist=False,
        )
        task = asyncio.create_task(self._analyze(placeholder))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return placeholder

    def delete(self, record_id: str) -> AppState:
        """Remove a record by id; unknown ids are ignored."""
        self._ensure_started()
        return self._commit(
            lambda state: replace(
                state,
                records=tuple(r for r in state.records if r.id != record_id),
            )
        )

    def set_goal(self, max_kcal: int) -> AppState:
        """Set the daily calorie goal, clamped to the supported range."""
        self._ensure_started()
        return self._commit(
            lambda state: replace(state, max_kcal=clamp_goal(max_kcal))
        )

    async def wait_idle(self) -> None:
        """Wait until every submitted analysis has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _analyze(self, placeholder: DietRecord) -> None:
        finished: DietRecord | None = None
        try:
            finished = await self._finished_record(placeholder)
        finally:
            self._pending -= 1
            if finished is None:
                # Cancelled: the placeholder stays, only is_loading is refreshed.
                self._commit(lambda state: state, persist=False)
            else:
                self._commit(lambda state: _replace_record(state, finished))

    async def _finished_record(self, placeholder: DietRecord) -> DietRecord:
        try:
            analysis = await self.analysis_service.analyze(placeholder.raw_text)
        except AnalysisError as exc:
            _logger.warning(
                "Diary analysis failed: record_id=%s error=%s",
                placeholder.id,
                type(exc).__name__,
            )
            finished = fail_record(placeholder, str(exc))
        except Exception as exc:
            _logger.exception(
                "Unexpected diary analysis error", extra={"record_id": placeholder.id}
            )
            finished = fail_record(placeholder, str(exc))
        else:
            finished = complete_record(
                placeholder,
                foods=[
                    FoodItem(emoji=item.emoji, name=item.name, calories=item.kcal)
                    for item in analysis.items
                ],
                total_calories=analysis.total_kcal,
                ai_comment=analysis.ai_comment,
            )
        return finished

    def _commit(
        self, transform: Callable[[AppState], AppState], persist: bool = True
    ) -> AppState:
        next_state = transform(self._state)
        next_state = replace(
            next_state,
            daily_calories=sum_daily_calories(next_state.records),
            is_loading=self._pending > 0,
        )
        self._state = next_state
        if persist:
            self.store.save_state(next_state.records, next_state.max_kcal)
        self._notify()
        return next_state

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self._state)

    def _ensure_started(self) -> None:
        if not self._started:
            raise RuntimeError("DiaryService.start() must run first")


def _replace_record(state: AppState, finished: DietRecord) -> AppState:
    if not any(record.id == finished.id for record in state.records):
        _logger.debug("Dropping result for deleted record: record_id=%s", finished.id)
        return state
    return replace(
        state,
        records=tuple(
            finished if record.id == finished.id else record
            for record in state.records
        ),
    )
