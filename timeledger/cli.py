"""
Command line access to the ledger.

Usage:
    python main.py report --date 2026-10-19 [--user user-1] [--csv] [--output FILE]
    python main.py add --task task-1 --hours 1 --minutes 30 [--date 2026-10-19]
    python main.py list [--date 2026-10-19] [--user user-1]
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from timeledger.domain.errors import TimeTrackingError
from timeledger.infra.config import get_settings
from timeledger.infra.tick_sources import ManualTickSource
from timeledger.services.directory import NameDirectory
from timeledger.services.report_service import TimesheetReportService
from timeledger.services.session import TrackingSession
from timeledger.utils import format_duration


def parse_date(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="timeledger", description="Weekly time ledger")
    parser.add_argument("--directory", type=Path, help="YAML file with user/task/project names")
    parser.add_argument("--user", help="Act as this user (default: configured user)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    report = commands.add_parser("report", help="Render the weekly timesheet")
    report.add_argument("--date", type=parse_date, default=None, help="Any day in the week (YYYY-MM-DD)")
    report.add_argument("--mine", action="store_true", help="Only the current user's time")
    report.add_argument("--csv", action="store_true", help="Matrix CSV instead of the text summary")
    report.add_argument("--output", type=Path, help="Write to this file instead of stdout")

    add = commands.add_parser("add", help="Add a manual time entry")
    add.add_argument("--task")
    add.add_argument("--project")
    add.add_argument("--date", type=parse_date, default=None)
    add.add_argument("--hours", type=int, default=0)
    add.add_argument("--minutes", type=int, default=0)
    add.add_argument("--description")

    listing = commands.add_parser("list", help="List one day's entries")
    listing.add_argument("--date", type=parse_date, default=None)

    return parser


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    directory = NameDirectory.from_yaml(args.directory) if args.directory else NameDirectory()
    # No timer is run from the command line
    session = await TrackingSession.open(
        settings, directory, user_id=args.user, tick_source=ManualTickSource()
    )
    try:
        return await _dispatch(args, settings, directory, session)
    finally:
        await session.close()


async def _dispatch(args: argparse.Namespace, settings, directory: NameDirectory,
                    session: TrackingSession) -> int:
    day = args.date or date.today()

    if args.command == "report":
        session.set_week(day)
        service = TimesheetReportService(session.ledger, directory)
        user_id = session.current_user_id() if args.mine else None
        if args.csv:
            content = service.generate_matrix_csv(session.week, user_id)
        else:
            content = service.generate_summary(
                session.week, user_id, template_name=settings.preferences.report_template
            )
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(content, encoding='utf-8')
            print(f"Report saved to: {args.output.absolute()}")
        else:
            print(content)

    elif args.command == "add":
        entry = await session.add_manual_entry({
            "task_id": args.task,
            "project_id": args.project,
            "date": day,
            "hours": args.hours,
            "minutes": args.minutes,
            "description": args.description,
        })
        print(f"Added {format_duration(entry.duration)} on {entry.date} ({entry.id})")

    elif args.command == "list":
        entries = session.get_day_entries(day, session.current_user_id())
        for entry in entries:
            name = directory.resolve_task_name(entry.task_id) if entry.task_id else "-"
            kind = "manual" if entry.is_manual else "timer"
            print(f"{entry.id}  {name:<30} {format_duration(entry.duration):>8}  {kind}")
        print(f"Total: {format_duration(session.get_total_time(entries))}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    try:
        return asyncio.run(run(args))
    except TimeTrackingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
