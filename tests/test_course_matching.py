"""Unit tests for course normalization, matching and session attribution."""

from datetime import datetime, timezone

from syllabus_planner.course_matching import (
    DEFAULT_RULES, INTERNSHIP, SPORTS_LAW_REVIEW, UNASSIGNED, CourseRule,
    attribute_session_course, build_tasks_by_id, extract_course_from_notes,
    match_course_record, matches, normalize,
)
from syllabus_planner.models import CourseRecord, SessionSnapshot, TaskSnapshot

WHEN = datetime(2025, 2, 1, tzinfo=timezone.utc)


def _session(**kwargs):
    return SessionSnapshot(id="s1", when=WHEN, minutes=30, **kwargs)


def test_normalize():
    """Test course key normalization."""
    assert normalize("Criminal Law") == normalize("Criminal")
    assert normalize("  Torts & Remedies ") == "torts and remedies"
    assert normalize("Civ. Pro.") == "civ pro"
    assert normalize("Law and Economics") == "law and economics"
    assert normalize("Law") == ""
    assert normalize(None) == ""


def test_matches():
    """Test loose course matching."""
    assert matches("Crim Law", "Criminal Law", "CRIM101")
    assert matches("crim101", "Criminal Law", "CRIM101")
    assert matches("Contracts", "Contracts II")
    assert not matches("Torts", "Criminal Law", "CRIM101")
    assert not matches("", "Torts")


def test_match_course_record_prefers_exact():
    """Test that an exact key beats an earlier loose match."""
    courses = [CourseRecord("1", "Contracts II"), CourseRecord("2", "Contracts")]
    assert match_course_record("Contracts", courses).id == "2"
    assert match_course_record("Contract", courses).id == "1"
    assert match_course_record("Evidence", courses) is None


def test_extract_course_from_notes():
    """Test leading [Course] tags in notes."""
    assert extract_course_from_notes("[Torts] ch 3") == "Torts"
    assert extract_course_from_notes("ch 3 [Torts]") == ""
    assert extract_course_from_notes(None) == ""


def test_attribute_linked_task_first():
    """Test that the linked task's course wins over notes."""
    tasks = build_tasks_by_id([TaskSnapshot("t1", course="Torts")])
    session = _session(task_id="t1", notes="[Contracts] mixed up")
    assert attribute_session_course(session, tasks) == "Torts"


def test_attribute_internship():
    """Test the internship activity rule."""
    assert attribute_session_course(_session(activity="internship"), {}) == INTERNSHIP


def test_attribute_notes_bracket():
    """Test course tags in notes."""
    assert attribute_session_course(_session(notes="[Evidence] hearsay"), {}) == "Evidence"


def test_attribute_sports_law_review_overrides():
    """Test that Sports Law Review replaces an earlier course."""
    tasks = build_tasks_by_id([TaskSnapshot("t1", course="Torts")])
    session = _session(task_id="t1", notes="SLR cite check")
    assert attribute_session_course(session, tasks) == SPORTS_LAW_REVIEW


def test_attribute_unassigned():
    """Test the fallback when no rule applies."""
    assert attribute_session_course(_session(notes="misc"), {}) == UNASSIGNED
    assert attribute_session_course(_session(task_id="missing"), {}) == UNASSIGNED


def test_custom_rules():
    """Test injecting an extra rule."""
    rules = DEFAULT_RULES + [CourseRule("default", lambda s, t, c: "Legal Writing")]
    assert attribute_session_course(_session(), {}, rules) == "Legal Writing"
    assert attribute_session_course(_session(notes="[Torts]"), {}, rules) == "Torts"
