"""Tests for the command line interface."""

import asyncio

import pytest

from kcal_diary.cli import build_parser, format_day_label, format_record, run
from kcal_diary.containers import AppContainer
from kcal_diary.domain.records import new_placeholder
from kcal_diary.services.store import KEY_HISTORY, KEY_LAST_DATE
from tests.conftest import FakeAnalysisClient, InMemoryKeyValueStore


def _run(container: AppContainer, *argv: str) -> int:
    args = build_parser().parse_args(list(argv))
    return asyncio.run(run(args, container))


def test_add_prints_analyzed_card(container: AppContainer, capsys) -> None:
    code = _run(container, "add", "two", "rice", "balls")

    out = capsys.readouterr().out
    assert code == 0
    assert "two rice balls" in out
    assert "🍙 rice ball 200kcal" in out
    assert "well done" in out
    assert "Today 400 / 2000 kcal (20%)" in out


def test_add_blank_text_fails(container: AppContainer, capsys) -> None:
    code = _run(container, "add", "   ")

    assert code == 1
    assert "Nothing to add" in capsys.readouterr().out


def test_add_shows_failure_item(
    container: AppContainer, analysis_client: FakeAnalysisClient, capsys
) -> None:
    analysis_client.output = ""

    _run(container, "add", "toast")

    assert "⚠️ AI analysis failed: empty response 0kcal" in capsys.readouterr().out


def test_today_lists_records(container: AppContainer, capsys) -> None:
    _run(container, "add", "toast")
    capsys.readouterr()

    code = _run(container, "today")

    out = capsys.readouterr().out
    assert code == 0
    assert "toast" in out
    assert "Today 400 / 2000 kcal" in out


def test_today_without_records(container: AppContainer, capsys) -> None:
    _run(container, "today")

    assert "No entries yet" in capsys.readouterr().out


def test_delete_by_prefix(container: AppContainer, capsys) -> None:
    _run(container, "add", "toast")
    record_id = container.diary_service.state.records[0].id

    code = _run(container, "delete", record_id[:6])

    assert code == 0
    assert container.diary_service.state.records == ()
    assert "Today 0 / 2000 kcal" in capsys.readouterr().out


def test_delete_unknown_id(container: AppContainer, capsys) -> None:
    code = _run(container, "delete", "nope")

    assert code == 1
    assert "No unique record" in capsys.readouterr().out


@pytest.mark.parametrize(("raw", "shown"), [("1800", 1800), ("50", 500)])
def test_goal_sets_clamped_value(
    container: AppContainer, raw: str, shown: int, capsys
) -> None:
    code = _run(container, "goal", raw)

    assert code == 0
    assert f"Goal set to {shown} kcal" in capsys.readouterr().out


def test_goal_rejects_text(container: AppContainer, capsys) -> None:
    assert _run(container, "goal", "lots") == 1


def test_history_lists_archived_days(
    container: AppContainer, kv_store: InMemoryKeyValueStore, capsys
) -> None:
    kv_store.values[KEY_LAST_DATE] = "2026-02-26"
    kv_store.values[KEY_HISTORY] = (
        '{"2026-02-25": [{"id": "a", "raw_text": "rice", "foods": '
        '[{"emoji": "🍙", "name": "rice ball", "calories": 600}], '
        '"total_calories": 600, "ai_comment": "", "is_analyzing": false}]}'
    )

    code = _run(container, "history")

    out = capsys.readouterr().out
    assert code == 0
    assert "🌱 February 25  600 kcal" in out
    assert "🍙 rice ball 600kcal" in out


def test_history_empty(container: AppContainer, capsys) -> None:
    _run(container, "history")

    assert "No history yet" in capsys.readouterr().out


def test_format_record_pending() -> None:
    record = new_placeholder("soup")

    assert format_record(record).endswith("analyzing...")


@pytest.mark.parametrize(
    ("key", "label"),
    [("2026-02-25", "February 25"), ("2026-12-01", "December 1"), ("someday", "someday")],
)
def test_format_day_label(key: str, label: str) -> None:
    assert format_day_label(key) == label
