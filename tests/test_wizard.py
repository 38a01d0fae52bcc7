"""Tests for the end-to-end import pipeline."""

import pytest
from datetime import date

from syllabus_planner.config import PlannerSettings
from syllabus_planner.errors import ExtractionEmpty
from syllabus_planner.models import CourseMppProfile, preview_to_dict
from syllabus_planner.wizard import build_preview, parse_syllabus, run_pipeline

SYLLABUS = "\n".join([
    "Torts I - Spring 2025",
    "Jan 10",
    "Read pp. 1-20",
    "Jan 12: Brief cases pp. 21-30",
    "Jan 20: No class - holiday",
    "Jan 22: Read pp. 40-30",
    "13/45: Read pp. 1-5",
])


def test_canonical_line():
    """Test the single-line example end to end."""
    preview = build_preview("Jan 10: Read pp. 1-20", timezone="America/Chicago",
                            reference_year=2025)
    assert preview.warnings == []
    assert len(preview.tasks) == 1
    task = preview.tasks[0]
    assert task.title == "Read"
    assert task.due_date == "2025-01-10T06:00:00Z"
    assert task.pages_read == 20
    assert task.estimated_minutes == 50
    assert task.estimate_guessed is False


def test_preview_document():
    """Test a small document with carry-forward and bad lines."""
    preview = build_preview(SYLLABUS, course="Torts")
    assert [(t.title, t.due_date, t.estimated_minutes) for t in preview.tasks] == [
        ("Read", "2025-01-10T06:00:00Z", 50),
        ("Brief cases", "2025-01-12T06:00:00Z", 30),
    ]
    assert all(t.course == "Torts" for t in preview.tasks)
    assert preview.tasks[1].task_type == "brief"
    assert preview.warnings == [
        "Line 6: InvalidRange: page range 40-30 runs backwards",
        "Line 7: UnresolvableDate: could not resolve date '13/45'",
    ]


def test_term_sets_year():
    """Test that a term in the header sets the year for bare dates."""
    preview = build_preview("Fall 2025\nSep 5: Read pp. 1-10\nJan 10: Read pp. 11-20")
    assert [t.due_date for t in preview.tasks] == [
        "2025-09-05T05:00:00Z",
        "2026-01-10T06:00:00Z",
    ]


def test_semester_start_sets_year():
    """Test an explicit semester start."""
    preview = build_preview("Jan 10: Read pp. 1-20", semester_start=date(2025, 8, 20))
    assert preview.tasks[0].due_date == "2026-01-10T06:00:00Z"


def test_empty_preview_never_raises():
    """Test that empty input gives no tasks and one warning."""
    for text in ("", "   \n\t\n"):
        preview = build_preview(text)
        assert preview.tasks == []
        assert preview.warnings == ["ExtractionEmpty: no usable text in document"]


def test_run_pipeline_raises_on_empty():
    """Test that the pipeline itself reports empty input."""
    with pytest.raises(ExtractionEmpty):
        run_pipeline("  ")
    with pytest.raises(ExtractionEmpty):
        parse_syllabus("")


def test_preview_is_repeatable():
    """Test identical output for identical input."""
    first = preview_to_dict(build_preview(SYLLABUS, reference_year=2025))
    second = preview_to_dict(build_preview(SYLLABUS, reference_year=2025))
    assert first == second


def test_preview_does_not_call_sink():
    """Test that preview mode has no side effects."""
    calls = []
    run_pipeline(SYLLABUS, preview_only=True, sink=calls.append)
    assert calls == []


def test_parse_syllabus_hands_drafts_to_sink():
    """Test direct mode with a bulk-create sink."""
    calls = []
    tasks = parse_syllabus(SYLLABUS, sink=calls.append)
    assert len(calls) == 1
    assert calls[0] == tasks
    assert len(tasks) == 2


def test_settings_and_profiles_injected():
    """Test that estimates use the caller's settings and profiles."""
    profiles = {"torts": CourseMppProfile("torts", 1.0, override_enabled=True, override_mpp=3.0)}
    preview = build_preview("Jan 10: Read pp. 1-20", course="Torts", reference_year=2025,
                            settings=PlannerSettings(overhead_minutes=0), profiles=profiles)
    assert preview.tasks[0].estimated_minutes == 60


def test_other_timezone():
    """Test due dates in a caller-supplied timezone."""
    preview = build_preview("Jan 10: Read pp. 1-20", timezone="Asia/Tokyo", reference_year=2025)
    assert preview.tasks[0].due_date == "2025-01-09T15:00:00Z"


def test_range_across_new_year():
    """Test a winter-break reading range with one trailing year."""
    preview = build_preview("Dec 29 - Jan 2, 2026: Read pp. 1-20", reference_year=2025)
    assert preview.warnings == []
    assert len(preview.tasks) == 1
    assert preview.tasks[0].due_date == "2026-01-02T06:00:00Z"
