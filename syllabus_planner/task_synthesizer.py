"""
Task synthesis module.

Turns classified lines into TaskDraft objects: a cleaned-up title, the due
date, the course, raw page counts and an estimate from the Estimator.
"""

import logging
import re
from typing import Iterable, List, Optional

from .date_resolver import DateResolver, strip_date_tokens
from .estimates import Estimator
from .models import AssignmentLine, TaskDraft, serialize_datetime
from .page_ranges import has_page_reference, page_count, strip_page_references

logger = logging.getLogger(__name__)

UNTITLED = "Untitled reading"

BULLET = re.compile(r"^\s*(?:[-–—•*]|\d+[.)])\s+")
COURSE_PREFIX = re.compile(r"^\s*\[([^\]]+)\]\s*")
WEEK_PREFIX = re.compile(r"^\s*(?:week|session|class)\s+\d+\b", re.IGNORECASE)
EDGE_PUNCTUATION = " \t;,:.|-–—()"

# "(45 min)", "~2 hrs", "1.5 hours"
DURATION = re.compile(
    r"\(?\s*~?\s*(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>min(?:ute)?s?|hrs?|hours?)\b\s*\)?",
    re.IGNORECASE,
)


def explicit_minutes(text: str) -> Optional[int]:
    """Minutes stated in the line itself, e.g. "(45 min)" or "2 hours"."""
    match = DURATION.search(text)
    if not match:
        return None
    value = float(match.group("value"))
    if match.group("unit").lower().startswith("h"):
        value *= 60
    minutes = int(round(value))
    return minutes if minutes > 0 else None


def infer_course(text: str) -> Optional[str]:
    """Course written as a leading "[Course]" tag on the line."""
    match = COURSE_PREFIX.match(BULLET.sub("", text))
    return match.group(1).strip() if match else None


def classify_task_type(text: str) -> str:
    """Rough kind of work a line describes."""
    lower = text.lower()
    if "brief" in lower and "case" in lower:
        return "brief"
    if "memo" in lower:
        return "memo"
    if "quiz" in lower:
        return "quiz"
    if re.search(r"\b(?:exam|midterm|final)\b", lower):
        return "exam"
    if re.search(r"\b(?:submit|due|turn in|upload)\b", lower):
        return "admin"
    return "reading"


def clean_title(text: str) -> str:
    """Line text without dates, page references, tags and list markers.

    Falls back to "Untitled reading" when nothing is left.
    """
    title = BULLET.sub("", text)
    title = COURSE_PREFIX.sub("", title)
    title = strip_date_tokens(title)
    title = strip_page_references(title)
    title = DURATION.sub(" ", title)
    title = re.sub(r"\(\s*\)", " ", title)
    title = re.sub(r"\s{2,}", " ", title).strip(EDGE_PUNCTUATION)
    title = WEEK_PREFIX.sub("", title).strip(EDGE_PUNCTUATION)
    return title or UNTITLED


# Words that mark a fragment of a line as assigned work
TASK_KEYWORDS = (
    "read", "pages", "chapter", "ch.", "section", "§", "assignment", "submit",
    "due", "turn in", "upload", "memo", "brief", "quiz", "exam", "midterm",
    "outline", "problem", "practice", "discussion", "paper", "case",
    "casebook", "supplement", "restatement", "statute", "article", "handout",
)

# Separators between several pieces of work, or cells of a table row
SUBTASK_SEPARATOR = re.compile(r"[;•|\t]")


def has_task_keyword(text: str) -> bool:
    lower = text.lower()
    return any(keyword in lower for keyword in TASK_KEYWORDS) or has_page_reference(text)


def split_subtasks(text: str) -> List[str]:
    """Split a line into the pieces of work it lists.

    "Read pp. 1-10; Brief Smith v. Jones" gives two pieces. Table rows
    ("Jan 10 | Read pp. 1-20 | Torts") are split into cells and only cells
    that look like work are kept. A line with no such piece is returned
    whole.
    """
    parts = [p.strip() for p in SUBTASK_SEPARATOR.split(text)]
    parts = [p for p in parts if p]
    if len(parts) <= 1:
        return [text]
    tasks = [p for p in parts if has_task_keyword(p)]
    return tasks or [text]


def _draft_for(text: str, line: AssignmentLine, due_date: str, estimator: Estimator,
               course: Optional[str]) -> TaskDraft:
    draft = TaskDraft(
        title=clean_title(text),
        due_date=due_date,
        source_line_index=line.line_index,
        course=course,
        estimated_minutes=explicit_minutes(text),
        pages_read=line.page_count if text == line.raw_text else page_count(text),
        task_type=classify_task_type(text),
    )
    result = estimator.estimate(draft)
    draft.estimated_minutes = result.minutes
    draft.estimate_guessed = result.guessed
    return draft


def synthesize_line(line: AssignmentLine, resolver: DateResolver, estimator: Estimator,
                    course: Optional[str] = None) -> List[TaskDraft]:
    """Build the drafts for one classified line.

    A line listing several pieces of work gives one draft per piece, all
    sharing the line's due date.

    Args:
        line: Classified line
        resolver: Resolver for the line's date token
        estimator: Estimator that fills in estimated_minutes
        course: Caller's course; wins over a course tag on the line

    Returns:
        List of drafts, empty if the line's date no longer resolves
    """
    span = resolver.resolve(line.date_tokens[0]) if line.date_tokens else None
    if span is None:
        logger.warning("Line %d has no resolvable date; skipping", line.line_index + 1)
        return []

    due_date = serialize_datetime(span.due)
    course = course or infer_course(line.raw_text)
    return [_draft_for(part, line, due_date, estimator, course)
            for part in split_subtasks(line.raw_text)]


def synthesize(lines: Iterable[AssignmentLine], resolver: DateResolver,
               estimator: Optional[Estimator] = None,
               course: Optional[str] = None) -> List[TaskDraft]:
    """Build drafts for every line, keeping source order."""
    estimator = estimator or Estimator()
    drafts = []
    for line in lines:
        drafts.extend(synthesize_line(line, resolver, estimator, course))
    return drafts


def sort_by_due(drafts: Iterable[TaskDraft]) -> List[TaskDraft]:
    """Drafts ordered by due date, then by position in the document."""
    return sorted(drafts, key=lambda d: (d.due_date, d.source_line_index))
