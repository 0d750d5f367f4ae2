"""
CLI (Command Line Interface).

    coursecal list [--day monday]
    coursecal add <code>
    coursecal remove <code>
    coursecal sessions
    coursecal conflicts
    coursecal export [file.ics] [--yes]

Sessions are generated on the fly from the selected course codes; nothing but
the selection itself is persisted.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from coursecal.catalog import course_by_code, load_courses
from coursecal.conflicts import courses_conflict, find_conflicts, find_course_conflicts
from coursecal.export_ics import default_filename, export_sessions_to_ics, summarize
from coursecal.model import Course
from coursecal.sessions import generate_sessions
from coursecal.storage import is_valid_code, load_selected_codes, save_selected_codes

console = Console()

WEEKDAY_LABELS = {
    "monday": "月",
    "tuesday": "火",
    "wednesday": "水",
    "thursday": "木",
    "friday": "金",
    "土日": "土日",
}


def _selected_courses(args: argparse.Namespace, by_code: dict[str, Course]) -> list[Course]:
    """
    Selected courses in selection order; unknown codes are skipped.
    """
    return [by_code[code] for code in load_selected_codes(args.selection) if code in by_code]


def _cmd_list(args: argparse.Namespace, courses: list[Course]) -> int:
    day = (args.day or "").strip().lower()
    shown = [c for c in courses if not day or c.recurrence == day]
    if not shown:
        print("No courses.")
        return 0
    for c in shown:
        label = WEEKDAY_LABELS.get(c.recurrence or "", "-")
        print(f"{c.code} | {label} | {c.name} | {c.instructor} | {c.faculty} | {c.credits}")
    return 0


def _cmd_add(args: argparse.Namespace, by_code: dict[str, Course]) -> int:
    """
    Add a course code to the selection unless its weekday slot is taken.
    """
    code = (args.code or "").strip()
    if not code:
        print("Please provide a course code.")
        return 1
    if not is_valid_code(code):
        print(f"Invalid course code: {code!r}")
        return 1

    selected = load_selected_codes(args.selection)
    if code in selected:
        print(f"Already selected: {code}")
        return 0

    course = by_code.get(code)
    if course is None:
        print(f"Warning: course '{code}' not found in catalog (adding anyway).")
    else:
        for other_code in selected:
            other = by_code.get(other_code)
            if other is not None and courses_conflict(course, other):
                print(f"'{other.name}' ({other.code}) already uses this slot. Remove it first.")
                return 1

    selected.append(code)
    save_selected_codes(selected, args.selection)
    print(f"Added: {code} (selected: {len(selected)})")
    return 0


def _cmd_remove(args: argparse.Namespace) -> int:
    code = (args.code or "").strip()
    if not code:
        print("Please provide a course code.")
        return 1

    selected = load_selected_codes(args.selection)
    if code not in selected:
        print(f"Not selected: {code}")
        return 0

    selected.remove(code)
    save_selected_codes(selected, args.selection)
    print(f"Removed: {code} (selected: {len(selected)})")
    return 0


def _cmd_sessions(args: argparse.Namespace, by_code: dict[str, Course]) -> int:
    sessions = generate_sessions(_selected_courses(args, by_code))
    if not sessions:
        print("No sessions. Select courses with 'coursecal add <code>'.")
        return 0

    table = Table(title=f"Sessions ({len(sessions)})", box=box.SIMPLE_HEAVY)
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Code")
    table.add_column("Course")
    table.add_column("Instructor")
    for s in sorted(sessions, key=lambda x: (x.date, x.start_time)):
        table.add_row(
            s.date.strftime("%Y-%m-%d (%a)"),
            f"{s.start_time}-{s.end_time}",
            s.course_code,
            f"[{s.color}]{s.course_name}[/]",
            s.professor,
        )
    console.print(table)
    return 0


def _cmd_conflicts(args: argparse.Namespace, by_code: dict[str, Course]) -> int:
    """
    Print conflicts among the selection. Warning only, exit code stays 0.
    """
    courses = _selected_courses(args, by_code)
    course_pairs = find_course_conflicts(courses)
    session_pairs = find_conflicts(generate_sessions(courses))

    if not course_pairs and not session_pairs:
        print("No conflicts found.")
        return 0

    for a, b in course_pairs:
        print(f"- same slot ({a.recurrence}): {a.code} {a.name}  <->  {b.code} {b.name}")
    for x, y in session_pairs:
        print(
            f"- {x.date.isoformat()} {x.start_time}-{x.end_time} {x.course_code}"
            f"  <->  {y.start_time}-{y.end_time} {y.course_code}"
        )
    return 0


def _cmd_export(args: argparse.Namespace, by_code: dict[str, Course]) -> int:
    sessions = generate_sessions(_selected_courses(args, by_code))
    if not sessions:
        print("No selected sessions to export.")
        return 0

    summary = summarize(sessions)
    print(summary.describe())

    if not args.yes and not Confirm.ask("Export these sessions?", console=console):
        print("Export cancelled.")
        return 0

    out_path = Path(args.out) if args.out else Path(default_filename())
    n = export_sessions_to_ics(sessions, out_path)
    print(f"Exported {n} sessions to: {out_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="coursecal", description="Schooling course calendar CLI")
    parser.add_argument("--catalog", type=Path, default=None, help="Course catalog JSON file")
    parser.add_argument("--selection", type=Path, default=None, help="Selected courses JSON file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List catalog courses")
    p_list.add_argument("--day", type=str, default=None, help="monday ... friday or 土日")

    p_add = sub.add_parser("add", help="Select a course by code")
    p_add.add_argument("code", type=str, help="Course code (e.g. 62502)")

    p_remove = sub.add_parser("remove", help="Deselect a course by code")
    p_remove.add_argument("code", type=str, help="Course code (e.g. 62502)")

    sub.add_parser("sessions", help="Show generated sessions of selected courses")
    sub.add_parser("conflicts", help="Show conflicts among selected courses")

    p_export = sub.add_parser("export", help="Export selected sessions to .ics")
    p_export.add_argument("out", type=str, nargs="?", default=None, help="Output file (default: keio-courses-<date>.ics)")
    p_export.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    courses = load_courses(args.catalog)
    by_code = course_by_code(courses)

    if args.command == "list":
        raise SystemExit(_cmd_list(args, courses))
    if args.command == "add":
        raise SystemExit(_cmd_add(args, by_code))
    if args.command == "remove":
        raise SystemExit(_cmd_remove(args))
    if args.command == "sessions":
        raise SystemExit(_cmd_sessions(args, by_code))
    if args.command == "conflicts":
        raise SystemExit(_cmd_conflicts(args, by_code))
    if args.command == "export":
        raise SystemExit(_cmd_export(args, by_code))

    raise SystemExit(2)
