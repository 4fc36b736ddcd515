"""
CLI (Command Line Interface).

    coursetable fetch <ucode> [--out FILE] [--no-cache] [--max-workers N]
    coursetable show <file> [--week N]
    coursetable timetable

Note:
- fetch logs in with the ucode, finds the current semester and fetches all of its weeks
- progress and failures go to the daily log file (see coursetable/log.py)
- output is plain text / JSON (no rich formatting)
"""

from __future__ import annotations

import argparse
import json
from functools import partial
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError

from coursetable.client import (
    build_session,
    find_current_semester,
    get_school_year,
    get_semester,
    get_user_info,
    get_week_course,
)
from coursetable.config import AppConfig
from coursetable.courses import collect_all_courses
from coursetable.errors import FetchError
from coursetable.log import init_logger
from coursetable.model import DayCourse, schedule_from_json, schedule_to_json
from coursetable.storage import load_cached_schedule, save_cached_schedule
from coursetable.timetable import get_school_schedule

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def _write_output(data: Dict[str, Any], out: str) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if not out:
        print(text)
        return
    out_path = Path(out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text, encoding="utf-8")
    print(f"Saved {len(data)} weeks to: {out}")


def _fetch_schedule(ucode: str, config: AppConfig, max_workers: int | None) -> tuple[Dict[int, List[DayCourse]], int]:
    """
    Run the whole login -> semester -> weeks -> courses chain.

    Returns (schedule, number of failed weeks). Raises FetchError if any of
    the preparatory requests fails, LookupError if there is no current semester.
    """
    with build_session() as session:
        user = get_user_info(ucode, session, config)

        current = find_current_semester(get_school_year(user.access_token, session, config))
        if current is None:
            raise LookupError("No current semester found.")

        weeks = get_semester(user.access_token, current.school_year, str(current.semester), session, config)
        report = collect_all_courses(
            user.credentials(),
            weeks,
            fetch=partial(get_week_course, session=session, config=config),
            max_workers=max_workers,
        )
    return report.courses, len(report.failures)


def _cmd_fetch(args: argparse.Namespace, config: AppConfig) -> int:
    """
    Fetch the current semester's schedule (or reuse the cache) and print / save it as JSON.
    """
    ucode = (args.ucode or "").strip()
    if not ucode:
        print("Please provide a ucode.")
        return 1

    if args.max_workers is not None and args.max_workers < 1:
        print("--max-workers must be at least 1.")
        return 1

    if not args.no_cache:
        cached = load_cached_schedule(ucode, ttl=config.cache_ttl)
        if cached is not None:
            print(f"Using cached schedule ({len(cached)} weeks).")
            _write_output(schedule_to_json(cached), args.out)
            return 0

    try:
        schedule, failed = _fetch_schedule(ucode, config, args.max_workers)
    except FetchError as e:
        print(f"Request failed: {e}")
        return 1
    except LookupError as e:
        print(str(e))
        return 1

    if failed:
        # incomplete results are not cached
        print(f"Warning: {failed} weeks could not be fetched (see log for details).")
    else:
        save_cached_schedule(ucode, schedule)

    _write_output(schedule_to_json(schedule), args.out)
    return 0


def _load_schedule_file(path: Path) -> Dict[int, List[DayCourse]]:
    try:
        return schedule_from_json(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return {}


def format_week(week: int, days: List[DayCourse]) -> List[str]:
    """
    Render one week as text lines, one line per occupied lesson slot.
    """
    schedule = get_school_schedule()
    lines = [f"Week {week}"]
    for day in sorted(days, key=lambda d: d.weekday):
        by_number = {s.course_number: s for s in day.courses}
        name = WEEKDAY_NAMES[day.weekday - 1] if 1 <= day.weekday <= 7 else f"Day {day.weekday}"
        for n in schedule.lesson_numbers():
            slot = by_number.get(n)
            if slot is None or slot.course_info is None:
                continue
            info = slot.course_info
            place = info.classroom or "-"
            teachers = ", ".join(t for t in info.teachers if t) or "-"
            lines.append(f"  {name} #{n:<2} {info.name} | {place} | {teachers}")
    if len(lines) == 1:
        lines.append("  (no courses)")
    return lines


def _cmd_show(args: argparse.Namespace) -> int:
    """
    Print one week of a schedule JSON file written by `fetch --out`.
    """
    schedule = _load_schedule_file(Path(args.file))
    if not schedule:
        print("No schedule data found.")
        return 1

    week = args.week if args.week is not None else min(schedule)
    if week not in schedule:
        print(f"Week {week} not in schedule (available: {', '.join(str(w) for w in sorted(schedule))}).")
        return 1

    for line in format_week(week, schedule[week]):
        print(line)
    return 0


def _cmd_timetable(args: argparse.Namespace) -> int:
    schedule = get_school_schedule()
    print(f"Lessons per day: {schedule.total_lessons}")
    print(f"Lesson duration: {schedule.lesson_duration} min")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="coursetable", description="Course table CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p_fetch = sub.add_parser("fetch", help="Fetch the current semester's course table")
    p_fetch.add_argument("ucode", type=str, help="Student ucode")
    p_fetch.add_argument("--out", "-o", type=str, default="", help="Write JSON to this file instead of stdout")
    p_fetch.add_argument("--no-cache", action="store_true", help="Ignore a cached schedule and re-fetch")
    p_fetch.add_argument("--max-workers", type=int, default=None, help="Cap concurrent week requests")

    p_show = sub.add_parser("show", help="Print one week of a saved schedule")
    p_show.add_argument("file", type=str, help="JSON file written by `fetch --out`")
    p_show.add_argument("--week", "-w", type=int, default=None, help="Week number (default: first week)")

    sub.add_parser("timetable", help="Show the static school timetable")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "fetch":
        try:
            config = AppConfig()
        except ValidationError as e:
            print(f"Invalid configuration: {e}")
            raise SystemExit(1)
        init_logger(config.log_dir)
        raise SystemExit(_cmd_fetch(args, config))
    if args.command == "show":
        raise SystemExit(_cmd_show(args))
    if args.command == "timetable":
        raise SystemExit(_cmd_timetable(args))

    raise SystemExit(2)
