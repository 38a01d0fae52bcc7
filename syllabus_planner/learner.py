"""
Adaptive minutes-per-page learning.

Compares logged study minutes with estimated minutes per course and
produces a bounded correction factor. The factor is recomputed from the
full task/session snapshot on every call; nothing is accumulated between
calls.

Also derives per-course minutes-per-page profiles from sessions that
logged pages read.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Mapping, Optional

from .course_matching import (
    DEFAULT_RULES, UNASSIGNED, CourseRule, attribute_session_course,
    build_tasks_by_id, normalize,
)
from .estimates import round_half_up
from .models import CourseMppProfile, SessionSnapshot, TaskSnapshot, clamp

logger = logging.getLogger(__name__)

SCALE_MIN = 0.5
SCALE_MAX = 2.0
DEFAULT_WINDOW_DAYS = 60


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def course_scale(estimated_sum: float, logged_sum: float) -> float:
    """Logged / estimated, clamped to [0.5, 2.0]; 1.0 with no estimates."""
    if estimated_sum <= 0:
        return 1.0
    return round(clamp(logged_sum / estimated_sum, SCALE_MIN, SCALE_MAX), 2)


def compute_course_scale(tasks: Iterable[TaskSnapshot],
                         sessions: Iterable[SessionSnapshot],
                         window_days: int = DEFAULT_WINDOW_DAYS,
                         as_of: Optional[datetime] = None,
                         rules: Iterable[CourseRule] = DEFAULT_RULES) -> Dict[str, float]:
    """Per-course correction factor for time estimates.

    Estimated minutes are summed over all tasks of a course. Logged minutes
    are summed over sessions attributed to the course that started within
    the last window_days up to and including as_of. Later sessions are
    ignored.

    Args:
        tasks: Task snapshot
        sessions: Session snapshot
        window_days: Trailing window for sessions
        as_of: End of the window (defaults to now, in UTC)
        rules: Session attribution rules

    Returns:
        Dict of normalized course key -> scale factor in [0.5, 2.0]
    """
    tasks = list(tasks)
    rules = list(rules)
    as_of = _aware(as_of) if as_of else datetime.now(timezone.utc)
    cutoff = as_of - timedelta(days=window_days)
    tasks_by_id = build_tasks_by_id(tasks)

    estimated: Dict[str, int] = defaultdict(int)
    logged: Dict[str, int] = defaultdict(int)

    for task in tasks:
        key = normalize(task.course)
        if key:
            estimated[key] += max(0, task.estimated_minutes or 0)

    for session in sessions:
        when = _aware(session.when)
        if when < cutoff or when > as_of:
            continue
        course = attribute_session_course(session, tasks_by_id, rules)
        key = normalize(course) if course != UNASSIGNED else ""
        if key:
            logged[key] += max(0, session.minutes or 0)

    scales = {key: course_scale(estimated.get(key, 0), logged.get(key, 0))
              for key in sorted(set(estimated) | set(logged))}
    logger.debug("Computed scale for %d course(s)", len(scales))
    return scales


def learn_course_mpp(sessions: Iterable[SessionSnapshot],
                     tasks: Iterable[TaskSnapshot] = (),
                     existing: Optional[Mapping[str, CourseMppProfile]] = None,
                     rules: Iterable[CourseRule] = DEFAULT_RULES) -> Dict[str, CourseMppProfile]:
    """Learn minutes per page for each course from logged reading sessions.

    Only sessions with both minutes and pages read count. Override settings
    on existing profiles are kept; courses with no new evidence keep their
    existing profile unchanged.

    Args:
        sessions: Session snapshot
        tasks: Task snapshot, used to attribute sessions linked to tasks
        existing: Current profiles keyed by normalized course key
        rules: Session attribution rules

    Returns:
        Dict of normalized course key -> CourseMppProfile
    """
    tasks_by_id = build_tasks_by_id(tasks)
    rules = list(rules)
    totals: Dict[str, Dict] = {}

    for session in sessions:
        minutes = max(0, session.minutes or 0)
        pages = max(0, session.pages_read or 0)
        if minutes <= 0 or pages <= 0:
            continue
        course = attribute_session_course(session, tasks_by_id, rules)
        key = normalize(course) if course != UNASSIGNED else ""
        if not key:
            continue
        row = totals.setdefault(key, {"minutes": 0, "pages": 0, "count": 0, "latest": None})
        row["minutes"] += minutes
        row["pages"] += pages
        row["count"] += 1
        when = _aware(session.when)
        if row["latest"] is None or when > row["latest"]:
            row["latest"] = when

    profiles = dict(existing or {})
    for key, row in totals.items():
        previous = profiles.get(key)
        profiles[key] = CourseMppProfile(
            course_key=key,
            minutes_per_page=row["minutes"] / row["pages"],
            sample_size=row["count"],
            override_enabled=previous.override_enabled if previous else False,
            override_mpp=previous.override_mpp if previous else None,
            updated_at=row["latest"],
        )
    return profiles


def recommended_mpp(base_mpp: float, scale: float) -> int:
    """Whole minutes per page suggested after applying a course scale."""
    return max(1, round_half_up(base_mpp * scale))
