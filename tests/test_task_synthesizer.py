"""Unit tests for turning classified lines into draft tasks."""

from syllabus_planner.config import PlannerSettings
from syllabus_planner.estimates import Estimator
from syllabus_planner.line_classifier import classify
from syllabus_planner.models import CourseMppProfile, TaskDraft
from syllabus_planner.task_synthesizer import (
    UNTITLED, classify_task_type, clean_title, explicit_minutes, infer_course,
    sort_by_due, split_subtasks, synthesize,
)


def _drafts(text, resolver, **kwargs):
    return synthesize(list(classify(text, resolver)), resolver, **kwargs)


def test_synthesize_basic_line(resolver):
    """Test the canonical reading line."""
    drafts = _drafts("Jan 10: Read pp. 1-20", resolver)
    assert len(drafts) == 1
    draft = drafts[0]
    assert draft.title == "Read"
    assert draft.due_date == "2025-01-10T06:00:00Z"
    assert draft.pages_read == 20
    assert draft.estimated_minutes == 50
    assert draft.estimate_guessed is False
    assert draft.task_type == "reading"
    assert draft.source_line_index == 0


def test_range_due_on_end(resolver):
    """Test that a range line is due on its last day."""
    draft = _drafts("Jan 10-12: Read pp. 1-10", resolver)[0]
    assert draft.due_date == "2025-01-12T06:00:00Z"


def test_inherited_date(resolver):
    """Test drafts for lines under a date heading."""
    drafts = _drafts("Jan 10\nRead pp. 1-20\nSkim pp. 21-25", resolver)
    assert [d.due_date for d in drafts] == ["2025-01-10T06:00:00Z"] * 2
    assert [d.title for d in drafts] == ["Read", "Skim"]


def test_untitled_fallback(resolver):
    """Test lines with nothing left after stripping."""
    draft = _drafts("Jan 10 - pp. 1-20", resolver)[0]
    assert draft.title == UNTITLED


def test_caller_course_wins(resolver):
    """Test that the caller's course overrides a [Course] tag."""
    text = "[Torts] Jan 10: Read pp. 1-20"
    assert _drafts(text, resolver)[0].course == "Torts"
    assert _drafts(text, resolver, course="Contracts")[0].course == "Contracts"


def test_course_profile_applied(resolver):
    """Test that the estimator picks the course profile."""
    estimator = Estimator(PlannerSettings(), {"torts": CourseMppProfile("torts", 3.0)})
    draft = _drafts("Jan 10: Read pp. 1-20", resolver, estimator=estimator,
                    course="Torts Law")[0]
    assert draft.estimated_minutes == 70


def test_explicit_duration_wins(resolver):
    """Test that a stated duration is used as the estimate."""
    draft = _drafts("Jan 10: Read pp. 1-20 (45 min)", resolver)[0]
    assert draft.estimated_minutes == 45
    assert draft.title == "Read"


def test_dated_line_without_pages_is_guessed(resolver):
    """Test the fallback estimate on a line with no pages."""
    draft = _drafts("Jan 15: Memo due", resolver)[0]
    assert draft.estimated_minutes == 30
    assert draft.estimate_guessed is True
    assert draft.task_type == "memo"


def test_source_order_preserved(resolver):
    """Test that drafts keep document order, and sort_by_due reorders."""
    drafts = _drafts("Jan 20: Read pp. 1-2\nJan 10: Read pp. 3-4", resolver)
    assert [d.source_line_index for d in drafts] == [0, 1]
    assert [d.source_line_index for d in sort_by_due(drafts)] == [1, 0]


def test_clean_title():
    """Test title cleanup."""
    assert clean_title("- Week 3: Jan 10 – Read Ch. 2, pp. 10-20") == "Read Ch. 2"
    assert clean_title("1. [Torts] Jan 10: Palsgraf") == "Palsgraf"


def test_explicit_minutes():
    """Test duration parsing."""
    assert explicit_minutes("Outline (45 min)") == 45
    assert explicit_minutes("Review ~1.5 hours") == 90
    assert explicit_minutes("Read pp. 1-20") is None


def test_infer_course():
    """Test leading course tags."""
    assert infer_course("- [Civ Pro] Read") == "Civ Pro"
    assert infer_course("Read [Torts]") is None


def test_classify_task_type():
    """Test keyword task types."""
    assert classify_task_type("Brief the case") == "brief"
    assert classify_task_type("Midterm review") == "exam"
    assert classify_task_type("Quiz 2") == "quiz"
    assert classify_task_type("Submit outline") == "admin"
    assert classify_task_type("Read chapter 4") == "reading"


def test_sort_by_due_stable_on_ties():
    """Test tie-breaking by source line."""
    a = TaskDraft(title="a", due_date="2025-01-10T06:00:00Z", source_line_index=3)
    b = TaskDraft(title="b", due_date="2025-01-10T06:00:00Z", source_line_index=1)
    assert sort_by_due([a, b]) == [b, a]


def test_roman_page_range(resolver):
    """Test a reading assigned in front-matter pages."""
    draft = _drafts("Jan 10: Read pp. xiii-xvii", resolver)[0]
    assert draft.title == "Read"
    assert draft.pages_read == 5
    assert draft.estimated_minutes == 20
    assert draft.estimate_guessed is False


def test_line_with_several_tasks(resolver):
    """Test one draft per piece of work listed on a line."""
    drafts = _drafts("Jan 10: Read pp. 1-10; Brief Smith v. Jones", resolver)
    assert [d.title for d in drafts] == ["Read", "Brief Smith v. Jones"]
    assert [d.pages_read for d in drafts] == [10, None]
    assert [d.estimated_minutes for d in drafts] == [30, 30]
    assert [d.estimate_guessed for d in drafts] == [False, True]
    assert {d.due_date for d in drafts} == {"2025-01-10T06:00:00Z"}
    assert {d.source_line_index for d in drafts} == {0}


def test_table_row(resolver):
    """Test that table cells are read separately."""
    drafts = _drafts("Jan 10 | Read pp. 1-20 | Torts", resolver)
    assert len(drafts) == 1
    assert drafts[0].title == "Read"
    assert drafts[0].pages_read == 20
    assert drafts[0].due_date == "2025-01-10T06:00:00Z"


def test_split_subtasks():
    """Test splitting on semicolons, bullets, pipes and tabs."""
    assert split_subtasks("Read pp. 1-5 • Outline ch. 2") == ["Read pp. 1-5", "Outline ch. 2"]
    assert split_subtasks("Jan 10\tRead pp. 1-5\tTorts") == ["Read pp. 1-5"]
    assert split_subtasks("Read pp. 1-5; bring laptop") == ["Read pp. 1-5"]
    assert split_subtasks("Lunch; coffee") == ["Lunch; coffee"]
    assert split_subtasks("Read pp. 1-5") == ["Read pp. 1-5"]
