"""
Configuration for the syllabus planner.

Settings are plain frozen dataclasses that callers build and pass in
explicitly. PlannerSettings.from_env() reads overrides from environment
variables for the CLI and the web app.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

import pytz

from .course_matching import normalize
from .errors import ConfigurationError
from .models import CourseMppProfile, deserialize_datetime

DEFAULT_TIMEZONE = "America/Chicago"


@dataclass(frozen=True)
class PlannerSettings:
    """Global knobs for estimation and learning.

    Attributes:
        baseline_mpp: Minutes per page when a course has no profile
        overhead_minutes: Fixed context-switch cost added to page estimates
        fallback_minutes: Estimate used when nothing is known about a task
        window_days: Trailing window of logged sessions used by the learner
        timezone: IANA timezone that due dates are computed in
    """
    baseline_mpp: float = 2.0
    overhead_minutes: int = 10
    fallback_minutes: int = 30
    window_days: int = 60
    timezone: str = DEFAULT_TIMEZONE

    def __post_init__(self):
        if self.baseline_mpp <= 0:
            raise ConfigurationError(f"baseline_mpp must be positive, got {self.baseline_mpp}")
        if self.window_days <= 0:
            raise ConfigurationError(f"window_days must be positive, got {self.window_days}")
        validate_timezone(self.timezone)

    @classmethod
    def from_env(cls) -> "PlannerSettings":
        """Build settings from PLANNER_* environment variables."""
        kwargs: Dict[str, Any] = {}
        mpp = os.getenv("PLANNER_MINUTES_PER_PAGE")
        if mpp:
            kwargs["baseline_mpp"] = _parse_number(mpp, float, "PLANNER_MINUTES_PER_PAGE")
        window = os.getenv("PLANNER_WINDOW_DAYS")
        if window:
            kwargs["window_days"] = _parse_number(window, int, "PLANNER_WINDOW_DAYS")
        tz = os.getenv("PLANNER_TIMEZONE")
        if tz:
            kwargs["timezone"] = tz
        return cls(**kwargs)


def _parse_number(raw: str, kind, name: str):
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def validate_timezone(name: str):
    """Return the pytz timezone for name, or raise ConfigurationError."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ConfigurationError(f"Unknown timezone: {name!r}")


def load_course_profiles(mapping: Mapping[str, Mapping[str, Any]]) -> Dict[str, CourseMppProfile]:
    """Build course profiles from a stored course-mpp map.

    The map is keyed by course name, each value shaped like
    {"mpp": 2.5, "sample": 4, "overrideEnabled": true, "overrideMpp": 3,
    "updatedAt": "2025-02-01T00:00:00Z"}. Keys are normalized so lookups
    by any spelling of the course name find the profile.

    Args:
        mapping: Course name -> stored profile fields

    Returns:
        Dict of normalized course key -> CourseMppProfile
    """
    profiles: Dict[str, CourseMppProfile] = {}
    for name, entry in mapping.items():
        key = normalize(name)
        if not key:
            continue
        mpp = _number_or_none(entry.get("mpp"))
        override = _number_or_none(entry.get("overrideMpp"))
        if mpp is None and override is None:
            continue
        updated: Optional[datetime] = None
        if entry.get("updatedAt"):
            updated = deserialize_datetime(entry["updatedAt"])
        profiles[key] = CourseMppProfile(
            course_key=key,
            minutes_per_page=mpp,
            sample_size=int(entry.get("sample") or 0),
            override_enabled=bool(entry.get("overrideEnabled")),
            override_mpp=override,
            updated_at=updated,
        )
    return profiles


def _number_or_none(value: Any) -> Optional[float]:
    # bool is an int subclass; a stored true/false is not a rate
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return None
    return float(value)
