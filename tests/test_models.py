"""Unit tests for data models."""

import pytest
from datetime import datetime, timezone

import pytz

from syllabus_planner.errors import UnresolvableDate
from syllabus_planner.models import (
    CourseMppProfile, DateToken, LineIssue, PageRange, PreviewResult, TaskDraft,
    deserialize_datetime, preview_to_dict, serialize_datetime, session_from_dict,
    task_draft_to_dict, task_from_dict,
)


def test_page_range_count():
    """Test inclusive page counts."""
    assert PageRange(1, 20).count == 20
    assert PageRange(7, 7).count == 1


def test_date_token_is_range():
    """Test range detection on tokens."""
    assert DateToken(text="Jan 10-12", start_text="Jan 10", end_text="Jan 12").is_range
    assert not DateToken(text="Jan 10", start_text="Jan 10").is_range


def test_course_profile_clamps():
    """Test that profile values are clamped to [0.5, 6.0]."""
    profile = CourseMppProfile(course_key="torts", minutes_per_page=12, override_mpp=0.1)
    assert profile.minutes_per_page == 6.0
    assert profile.override_mpp == 0.5


def test_line_issue_describe():
    """Test warning text for a skipped line."""
    issue = LineIssue(4, UnresolvableDate("could not resolve date '13/45'"))
    assert issue.describe() == "Line 5: UnresolvableDate: could not resolve date '13/45'"


def test_serialize_datetime():
    """Test UTC serialization with a Z suffix."""
    local = pytz.timezone("America/Chicago").localize(datetime(2025, 1, 10))
    assert serialize_datetime(local) == "2025-01-10T06:00:00Z"

    with pytest.raises(ValueError):
        serialize_datetime(datetime(2025, 1, 10))


def test_deserialize_datetime():
    """Test parsing Z-suffixed and naive strings."""
    assert deserialize_datetime("2025-01-10T06:00:00Z") == datetime(2025, 1, 10, 6, tzinfo=timezone.utc)
    assert deserialize_datetime("2025-01-10T06:00:00").tzinfo is not None


def test_task_draft_to_dict():
    """Test camelCase draft serialization."""
    draft = TaskDraft(title="Read", due_date="2025-01-10T06:00:00Z", source_line_index=0,
                      estimated_minutes=50, pages_read=20)
    data = task_draft_to_dict(draft)
    assert data["dueDate"] == "2025-01-10T06:00:00Z"
    assert data["estimatedMinutes"] == 50
    assert data["pagesRead"] == 20
    assert data["estimateGuessed"] is False

    preview = preview_to_dict(PreviewResult(tasks=[draft], warnings=["w"]))
    assert preview == {"tasks": [data], "warnings": ["w"]}


def test_snapshots_from_dict():
    """Test building snapshots from stored records."""
    task = task_from_dict({"id": 1, "course": "Torts", "estimatedMinutes": "45"})
    assert task.id == "1"
    assert task.estimated_minutes == 45

    session = session_from_dict({"id": "s1", "when": "2025-02-01T12:00:00Z", "minutes": 30,
                                 "taskId": "1", "pagesRead": 12})
    assert session.when.tzinfo is not None
    assert session.task_id == "1"
    assert session.pages_read == 12
