"""
Command line interface for the calorie diary.

Usage:
    kcal-diary add <text>
    kcal-diary today
    kcal-diary delete <record-id>
    kcal-diary goal <kcal>
    kcal-diary history
"""

import argparse
import asyncio
from datetime import date

from kcal_diary.app_logging import configure_logging
from kcal_diary.config import Settings
from kcal_diary.containers import AppContainer, build_container
from kcal_diary.domain.garden import (
    HistoryDay,
    goal_progress,
    parse_goal_input,
    summarize_history,
)
from kcal_diary.domain.records import AppState, DietRecord

SHORT_ID_LENGTH = 8


def format_header(state: AppState) -> str:
    """Render today's garden stage and calorie total."""
    progress = goal_progress(state.daily_calories, state.max_kcal)
    return (
        f"{progress.stage.emoji} {progress.stage.label}\n"
        f"Today {state.daily_calories} / {state.max_kcal} kcal ({progress.percent}%)"
    )


def format_record(record: DietRecord) -> str:
    """Render one record as a text card."""
    lines = [f"[{record.id[:SHORT_ID_LENGTH]}] {record.raw_text}"]
    if record.is_analyzing:
        lines.append("  analyzing...")
        return "\n".join(lines)
    lines.extend(
        f"  {food.emoji} {food.name} {food.calories}kcal" for food in record.foods
    )
    if record.ai_comment:
        lines.append(f"  {record.ai_comment}")
    return "\n".join(lines)


def format_day_label(key: str) -> str:
    """Render an ISO date key as month and day, e.g. "February 25"."""
    try:
        parsed = date.fromisoformat(key)
    except ValueError:
        return key
    return f"{parsed:%B} {parsed.day}"


def format_history_day(day: HistoryDay) -> str:
    """Render an archived day with its foods."""
    lines = [f"{day.emoji} {format_day_label(day.date)}  {day.total_calories} kcal"]
    for record in day.records:
        lines.extend(
            f"    {food.emoji} {food.name} {food.calories}kcal"
            for food in record.foods
        )
    return "\n".join(lines)


async def cmd_add(args: argparse.Namespace, container: AppContainer) -> int:
    """Submit a diary entry and wait for its analysis."""
    service = container.diary_service
    placeholder = await service.submit(" ".join(args.text))
    if placeholder is None:
        print("Error: Nothing to add.")
        return 1
    await service.wait_idle()
    record = next((r for r in service.state.records if r.id == placeholder.id), None)
    if record is not None:
        print(format_record(record))
    print(format_header(service.state))
    return 0


async def cmd_today(args: argparse.Namespace, container: AppContainer) -> int:
    """Show today's total and records."""
    state = container.diary_service.state
    print(format_header(state))
    if not state.records:
        print("No entries yet. What did you eat today?")
        return 0
    for record in state.records:
        print(format_record(record))
    return 0


async def cmd_delete(args: argparse.Namespace, container: AppContainer) -> int:
    """Delete a record by id or unique id prefix."""
    service = container.diary_service
    matches = [r for r in service.state.records if r.id.startswith(args.record_id)]
    if len(matches) != 1:
        print(f"Error: No unique record matches: {args.record_id}")
        return 1
    state = service.delete(matches[0].id)
    print(f"Deleted {matches[0].id[:SHORT_ID_LENGTH]}")
    print(format_header(state))
    return 0


async def cmd_goal(args: argparse.Namespace, container: AppContainer) -> int:
    """Update the daily calorie goal."""
    value = parse_goal_input(args.value)
    if value is None:
        print(f"Error: Not a number: {args.value}")
        return 1
    state = container.diary_service.set_goal(value)
    print(f"Goal set to {state.max_kcal} kcal")
    return 0


async def cmd_history(args: argparse.Namespace, container: AppContainer) -> int:
    """List archived days, newest first."""
    days = summarize_history(container.diary_service.state.history)
    if not days:
        print("No history yet.")
        return 0
    for day in days:
        print(format_history_day(day))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="kcal-diary",
        description="Write what you ate; AI estimates the calories.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Add a diary entry")
    add_parser.add_argument("text", nargs="+", help="What you ate")
    add_parser.set_defaults(func=cmd_add)

    today_parser = subparsers.add_parser("today", help="Show today's entries")
    today_parser.set_defaults(func=cmd_today)

    delete_parser = subparsers.add_parser("delete", help="Delete an entry")
    delete_parser.add_argument("record_id", help="Record id or its prefix")
    delete_parser.set_defaults(func=cmd_delete)

    goal_parser = subparsers.add_parser("goal", help="Set the daily kcal goal")
    goal_parser.add_argument("value", help="Goal in kcal (500-10000)")
    goal_parser.set_defaults(func=cmd_goal)

    history_parser = subparsers.add_parser("history", help="Show previous days")
    history_parser.set_defaults(func=cmd_history)

    return parser


async def run(args: argparse.Namespace, container: AppContainer) -> int:
    """Start a diary session and dispatch one command."""
    try:
        container.diary_service.start()
        return await args.func(args, container)
    finally:
        await container.close_resources()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(settings.log_level)
    return asyncio.run(run(args, build_container(settings)))


if __name__ == "__main__":
    raise SystemExit(main())
