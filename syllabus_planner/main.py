"""
Main CLI entry point for the syllabus planner.

Commands:
    preview  Parse a plain-text syllabus into draft tasks (JSON)
    scale    Per-course estimate scale from a task/session snapshot (JSON)
    learn    Learned minutes-per-page profiles from a session snapshot (JSON)
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import PlannerSettings, load_course_profiles
from .errors import PlannerError
from .learner import compute_course_scale, learn_course_mpp
from .models import (
    preview_to_dict, serialize_datetime, session_from_dict, task_from_dict,
)
from .wizard import build_preview


def _read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_output(payload: Dict[str, Any], output: Optional[str]):
    text = json.dumps(payload, indent=2)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        print(f"Saved output to: {output}")
    else:
        print(text)


def _settings_from_args(args) -> PlannerSettings:
    settings = PlannerSettings.from_env()
    if getattr(args, "minutes_per_page", None):
        settings = replace(settings, baseline_mpp=args.minutes_per_page)
    if getattr(args, "timezone", None):
        settings = replace(settings, timezone=args.timezone)
    if getattr(args, "window_days", None):
        settings = replace(settings, window_days=args.window_days)
    return settings


def _load_snapshot(path: Path):
    data = _read_json(path)
    try:
        tasks = [task_from_dict(t) for t in data.get("tasks", [])]
        sessions = [session_from_dict(s) for s in data.get("sessions", [])]
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Invalid snapshot {path}: {type(e).__name__}: {e}") from e
    return tasks, sessions


def cmd_preview(args) -> int:
    text_path = Path(args.text_path)
    if not text_path.exists():
        print(f"Error: text file not found: {text_path}")
        return 1

    settings = _settings_from_args(args)
    profiles = load_course_profiles(_read_json(Path(args.profiles))) if args.profiles else None
    semester_start = date.fromisoformat(args.semester_start) if args.semester_start else None

    preview = build_preview(
        text_path.read_text(encoding="utf-8"),
        course=args.course,
        timezone=settings.timezone,
        reference_year=args.year,
        semester_start=semester_start,
        settings=settings,
        profiles=profiles,
    )
    _write_output(preview_to_dict(preview), args.output)
    return 0


def cmd_scale(args) -> int:
    settings = _settings_from_args(args)
    tasks, sessions = _load_snapshot(Path(args.snapshot))
    scales = compute_course_scale(tasks, sessions, window_days=settings.window_days)
    _write_output({"courses": [{"course": k, "estScale": v} for k, v in scales.items()]},
                  args.output)
    return 0


def cmd_learn(args) -> int:
    tasks, sessions = _load_snapshot(Path(args.snapshot))
    existing = load_course_profiles(_read_json(Path(args.profiles))) if args.profiles else None
    profiles = learn_course_mpp(sessions, tasks, existing)
    payload = {
        key: {
            "mpp": round(p.minutes_per_page, 2) if p.minutes_per_page else None,
            "sample": p.sample_size,
            "overrideEnabled": p.override_enabled,
            "overrideMpp": p.override_mpp,
            "updatedAt": serialize_datetime(p.updated_at) if p.updated_at else None,
        }
        for key, p in sorted(profiles.items())
    }
    _write_output(payload, args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Turn syllabus text into dated, time-estimated study tasks"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log skipped lines and pipeline details"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    preview = sub.add_parser("preview", help="Parse a plain-text syllabus into draft tasks")
    preview.add_argument("text_path", type=str, help="Path to extracted syllabus text")
    preview.add_argument("--course", type=str, default=None, help="Course for every task")
    preview.add_argument("--timezone", type=str, default=None,
                         help="IANA timezone for due dates (default: America/Chicago)")
    preview.add_argument("--year", type=int, default=None,
                         help="Year for dates written without one")
    preview.add_argument("--semester-start", type=str, default=None,
                         help="First day of the semester (YYYY-MM-DD)")
    preview.add_argument("--minutes-per-page", type=float, default=None,
                         help="Baseline minutes per page (default: 2.0)")
    preview.add_argument("--profiles", type=str, default=None,
                         help="JSON file with per-course minutes-per-page settings")
    preview.add_argument("--output", type=str, default=None, help="Write JSON here instead of stdout")
    preview.set_defaults(func=cmd_preview)

    scale = sub.add_parser("scale", help="Per-course estimate scale from logged sessions")
    scale.add_argument("snapshot", type=str, help="JSON file with 'tasks' and 'sessions'")
    scale.add_argument("--window-days", type=int, default=None,
                       help="Trailing window of sessions (default: 60)")
    scale.add_argument("--output", type=str, default=None, help="Write JSON here instead of stdout")
    scale.set_defaults(func=cmd_scale)

    learn = sub.add_parser("learn", help="Learn minutes per page from logged reading sessions")
    learn.add_argument("snapshot", type=str, help="JSON file with 'tasks' and 'sessions'")
    learn.add_argument("--profiles", type=str, default=None,
                       help="Existing per-course settings to keep overrides from")
    learn.add_argument("--output", type=str, default=None, help="Write JSON here instead of stdout")
    learn.set_defaults(func=cmd_learn)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (PlannerError, ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
