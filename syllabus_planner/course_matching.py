"""
Course matching module.

Normalizes course names so that "Criminal Law", "criminal law" and
"Criminal" share a key, matches loosely written course names against course
records, and decides which course a logged study session belongs to.

Session attribution is an ordered list of CourseRule objects. A rule
either fills in a course when none is known yet or, with overrides=True,
replaces whatever earlier rules chose.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .models import CourseRecord, SessionSnapshot, TaskSnapshot

UNASSIGNED = "Unassigned"
INTERNSHIP = "Internship"
SPORTS_LAW_REVIEW = "Sports Law Review"

_NOTES_COURSE = re.compile(r"^\s*\[([^\]]+)\]")
_SLR = re.compile(r"\bslr\b|sports law review", re.IGNORECASE)


def normalize(name: Optional[str]) -> str:
    """Normalize a course name to a matching key.

    Lowercases, turns "&" into "and", collapses runs of anything that is not
    a letter or digit into single spaces and drops a trailing "law" word.

    Args:
        name: Course name or code

    Returns:
        Key string ("" for empty input)
    """
    key = (name or "").lower().strip()
    if not key:
        return ""
    key = key.replace("&", "and")
    key = re.sub(r"[^a-z0-9]+", " ", key).strip()
    key = re.sub(r"(?:^|\s+)law$", "", key).strip()
    return key


def matches(session_course: str, target_title: str, target_code: Optional[str] = None) -> bool:
    """Check whether a course name refers to a course record.

    True on equal keys, equal to the code, or when either key contains the
    other. The containment check is deliberately loose because syllabi and
    notes abbreviate course names.
    """
    session_key = normalize(session_course)
    title_key = normalize(target_title)
    code_key = normalize(target_code) if target_code else ""
    if not session_key or not title_key:
        return False

    if session_key == title_key:
        return True
    if code_key and session_key == code_key:
        return True
    if session_key in title_key or title_key in session_key:
        return True
    if code_key and (session_key in code_key or code_key in session_key):
        return True
    return False


def match_course_record(name: Optional[str], courses: Iterable[CourseRecord]) -> Optional[CourseRecord]:
    """Find the course record a name refers to.

    Exact key matches win over loose ones; otherwise the first loose match
    in the given order is returned.
    """
    if not normalize(name):
        return None
    candidates = list(courses)
    key = normalize(name)
    for course in candidates:
        if key == normalize(course.title) or (course.code and key == normalize(course.code)):
            return course
    for course in candidates:
        if matches(name, course.title, course.code):
            return course
    return None


def extract_course_from_notes(notes: Optional[str]) -> str:
    """Course written as a leading "[Course Name]" in free-text notes."""
    if not notes:
        return ""
    match = _NOTES_COURSE.match(notes)
    return match.group(1).strip() if match else ""


def build_tasks_by_id(tasks: Iterable[TaskSnapshot]) -> Dict[str, TaskSnapshot]:
    return {t.id: t for t in tasks if t.id}


RuleFunc = Callable[[SessionSnapshot, Mapping[str, TaskSnapshot], str], Optional[str]]


@dataclass(frozen=True)
class CourseRule:
    """One step of session attribution.

    Attributes:
        name: Short label for the rule
        resolve: Called with (session, tasks_by_id, course so far); returns a
            course name when the rule applies, else None
        overrides: Apply even when an earlier rule already picked a course
    """
    name: str
    resolve: RuleFunc
    overrides: bool = False


def _linked_task_course(session, tasks_by_id, current):
    task = tasks_by_id.get(session.task_id) if session.task_id else None
    if task is None:
        return None
    return (task.course or "").strip() or None


def _internship(session, tasks_by_id, current):
    return INTERNSHIP if (session.activity or "").lower() == "internship" else None


def _notes_bracket(session, tasks_by_id, current):
    return extract_course_from_notes(session.notes) or None


def _sports_law_review(session, tasks_by_id, current):
    if _SLR.search(session.notes or "") or "sports law review" in current.lower():
        return SPORTS_LAW_REVIEW
    return None


DEFAULT_RULES: List[CourseRule] = [
    CourseRule("linked-task", _linked_task_course),
    CourseRule("internship", _internship),
    CourseRule("notes-bracket", _notes_bracket),
    # Replaces a course picked by the rules above
    CourseRule("sports-law-review", _sports_law_review, overrides=True),
]


def attribute_session_course(session: SessionSnapshot,
                             tasks_by_id: Mapping[str, TaskSnapshot],
                             rules: Iterable[CourseRule] = DEFAULT_RULES) -> str:
    """Decide which course a study session counts toward.

    Args:
        session: The logged session
        tasks_by_id: Tasks keyed by id, for sessions linked to a task
        rules: Attribution rules in priority order

    Returns:
        Course name, or "Unassigned" when no rule applies
    """
    course = ""
    for rule in rules:
        if course and not rule.overrides:
            continue
        found = rule.resolve(session, tasks_by_id, course)
        if found:
            course = found
    return course or UNASSIGNED
