"""
Data models for the syllabus planner.

This module defines the data structures passed between the parsing and
estimation stages. All models are dataclasses. Records that describe input
or intermediate state (tokens, lines, snapshots, profiles) are frozen so a
stage can never change what an earlier stage produced.

These models represent:
- Date tokens and the day spans they resolve to
- Classified syllabus lines
- Draft tasks handed on to the storage collaborator
- Per-course minutes-per-page profiles and estimate results
- Task, session and course snapshots read by the learner and matcher
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

MPP_MIN = 0.5
MPP_MAX = 6.0


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def clamp_mpp(value: float) -> float:
    """Clamp a minutes-per-page value into the supported range."""
    return clamp(value, MPP_MIN, MPP_MAX)


@dataclass(frozen=True)
class DateToken:
    """A date-like span of text found in a line.

    For a range like "Jan 10-12" the start_text is "Jan 10" and the
    end_text is "Jan 12". Single dates have no end_text.
    """
    text: str                   # Exact text matched in the line
    start_text: str             # First (or only) date without its year, e.g. "Jan 10" or "1/10"
    end_text: Optional[str] = None  # Range end in the same form, if any
    year: Optional[int] = None  # Explicit year written with the token
    end_year: Optional[int] = None  # Explicit year on the range end when written separately
    weekday: Optional[str] = None  # Weekday written before the date, e.g. "Mon"

    @property
    def is_range(self) -> bool:
        return self.end_text is not None


@dataclass(frozen=True)
class DateSpan:
    """Boundary instants of a resolved token, both in UTC."""
    start: datetime
    end: datetime

    @property
    def due(self) -> datetime:
        # Work is due by the end of a range
        return self.end


@dataclass(frozen=True)
class PageRange:
    """Inclusive page range. Single pages have start == end."""
    start: int
    end: int

    @property
    def count(self) -> int:
        return abs(self.end - self.start) + 1


@dataclass(frozen=True)
class AssignmentLine:
    """A syllabus line that looks like assigned work.

    When inherited_date is True the line had no date of its own and
    date_tokens holds the single token carried forward from an earlier line.
    """
    raw_text: str
    line_index: int             # 0-based index into the unwrapped document lines
    date_tokens: List[DateToken] = field(default_factory=list)
    page_count: Optional[int] = None
    inherited_date: bool = False


@dataclass(frozen=True)
class LineIssue:
    """A non-fatal problem with one line. The line is skipped."""
    line_index: int
    error: Exception

    def describe(self) -> str:
        return f"Line {self.line_index + 1}: {type(self.error).__name__}: {self.error}"


@dataclass
class TaskDraft:
    """A candidate task produced by parsing. Never persisted here."""
    title: str
    due_date: str               # ISO instant in UTC, e.g. "2025-01-10T06:00:00Z"
    source_line_index: int
    course: Optional[str] = None
    estimated_minutes: Optional[int] = None
    pages_read: Optional[int] = None
    estimate_guessed: bool = False  # True when the estimate is the fallback default
    task_type: str = "reading"  # reading, brief, memo, quiz, exam or admin


@dataclass(frozen=True)
class EstimateResult:
    """Estimated minutes and whether the value is only a default guess."""
    minutes: int
    guessed: bool


@dataclass(frozen=True)
class CourseMppProfile:
    """Per-course minutes-per-page configuration.

    Positive minutes_per_page and override_mpp values are clamped to
    [0.5, 6.0] on construction. Missing or non-positive values become None,
    meaning nothing has been learned or set for the course.
    """
    course_key: str             # Normalized course key (see course_matching.normalize)
    minutes_per_page: Optional[float] = None
    sample_size: int = 0        # Number of logged sessions behind the learned value
    override_enabled: bool = False
    override_mpp: Optional[float] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "minutes_per_page", _positive_mpp(self.minutes_per_page))
        object.__setattr__(self, "override_mpp", _positive_mpp(self.override_mpp))


def _positive_mpp(value: Optional[float]) -> Optional[float]:
    if value is None or value <= 0:
        return None
    return clamp_mpp(float(value))


@dataclass(frozen=True)
class TaskSnapshot:
    """Read-only view of a persisted task."""
    id: str
    course: Optional[str] = None
    estimated_minutes: Optional[int] = None
    title: Optional[str] = None
    activity: Optional[str] = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a logged study session."""
    id: str
    when: datetime              # Timezone-aware timestamp of the session
    minutes: int
    task_id: Optional[str] = None
    activity: Optional[str] = None
    notes: Optional[str] = None
    pages_read: Optional[int] = None


@dataclass(frozen=True)
class CourseRecord:
    """A course as stored by the storage collaborator."""
    id: str
    title: str
    code: Optional[str] = None


@dataclass
class PreviewResult:
    """Review-only payload returned by the wizard."""
    tasks: List[TaskDraft] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


# Serialization helpers for JSON conversion

def serialize_datetime(dt: datetime) -> str:
    """Convert an aware datetime to a UTC ISO string ending in Z."""
    if dt.tzinfo is None:
        raise ValueError("Cannot serialize a naive datetime as UTC")
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def deserialize_datetime(s: str) -> datetime:
    """Convert an ISO string (Z suffix allowed) to an aware datetime.

    Naive strings are read as UTC.
    """
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def task_draft_to_dict(draft: TaskDraft) -> Dict[str, Any]:
    """Convert a TaskDraft to the dict shape the bulk-create endpoint takes."""
    return {
        "title": draft.title,
        "course": draft.course,
        "dueDate": draft.due_date,
        "estimatedMinutes": draft.estimated_minutes,
        "pagesRead": draft.pages_read,
        "estimateGuessed": draft.estimate_guessed,
        "taskType": draft.task_type,
        "sourceLineIndex": draft.source_line_index,
    }


def preview_to_dict(preview: PreviewResult) -> Dict[str, Any]:
    """Convert a PreviewResult to a JSON-serializable dict."""
    return {
        "tasks": [task_draft_to_dict(t) for t in preview.tasks],
        "warnings": list(preview.warnings),
    }


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def task_from_dict(data: Dict[str, Any]) -> TaskSnapshot:
    """Build a TaskSnapshot from a stored task record (camelCase keys)."""
    return TaskSnapshot(
        id=str(data["id"]),
        course=data.get("course"),
        estimated_minutes=_optional_int(data.get("estimatedMinutes")),
        title=data.get("title"),
        activity=data.get("activity"),
    )


def session_from_dict(data: Dict[str, Any]) -> SessionSnapshot:
    """Build a SessionSnapshot from a stored session record (camelCase keys)."""
    when: Union[str, datetime] = data["when"]
    if isinstance(when, str):
        when = deserialize_datetime(when)
    return SessionSnapshot(
        id=str(data["id"]),
        when=when,
        minutes=int(data.get("minutes") or 0),
        task_id=data.get("taskId"),
        activity=data.get("activity"),
        notes=data.get("notes"),
        pages_read=_optional_int(data.get("pagesRead")),
    )


def course_from_dict(data: Dict[str, Any]) -> CourseRecord:
    """Build a CourseRecord from a stored course record."""
    return CourseRecord(id=str(data["id"]), title=data["title"], code=data.get("code"))
