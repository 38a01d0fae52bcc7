"""
Line classification module.

Scans document text line by line and picks out lines that look like
assigned work: lines with a resolvable date or a page reference.

The scan is a fold over the lines. ScanState carries the most recent date
forward so that a line like "Read pp. 21-40" under a "Jan 10" heading is
due on Jan 10. classify_line() is the pure per-line step; scan() and
classify() are single-pass generators built on it.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

from .date_resolver import WEEKDAY, DateResolver, find_date_tokens, strip_date_tokens
from .errors import InvalidRange, UnresolvableDate
from .models import AssignmentLine, DateToken, LineIssue
from .page_ranges import page_count

logger = logging.getLogger(__name__)

# Lines about days without work; they neither produce tasks nor set dates
STOP_PATTERN = re.compile(
    r"\b(?:no class(?:es)?|holiday|break|reading (?:day|period)|cancell?ed)\b",
    re.IGNORECASE,
)

# Words that may sit next to a date in a heading like "Week 3 - Mon, Jan 20"
HEADING_FILLER = re.compile(
    r"\b(?:week|session|class|lecture|day|of)\b|\b(?:" + WEEKDAY + r")\b|\d+",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ScanState:
    """Accumulator threaded through the scan."""
    last_token: Optional[DateToken] = None


StepResult = Tuple[Optional[AssignmentLine], ScanState, Optional[LineIssue]]


def unwrap_hyphenation(text: str) -> str:
    """Join words split across lines: "exam-\\nple" -> "example"."""
    return re.sub(r"([A-Za-z])-\r?\n([a-z])", r"\1\2", text)


def _is_heading(line: str) -> bool:
    residue = HEADING_FILLER.sub(" ", strip_date_tokens(line))
    return not re.search(r"[A-Za-z]", residue)


def classify_line(raw: str, index: int, state: ScanState,
                  resolver: DateResolver) -> StepResult:
    """Classify one line given the scan state so far.

    Args:
        raw: Line text
        index: 0-based line index
        state: Accumulator from the previous line
        resolver: Resolver used to check that dates are real

    Returns:
        Tuple of (AssignmentLine or None, next state, LineIssue or None)
    """
    line = raw.strip()
    if not line:
        return None, state, None
    if STOP_PATTERN.search(line):
        logger.debug("Skipping line %d: no work that day", index)
        return None, state, None

    tokens = find_date_tokens(line)
    resolved = [t for t in tokens if resolver.resolve(t) is not None]
    if tokens and not resolved:
        issue = LineIssue(index, UnresolvableDate(f"could not resolve date {tokens[0].text!r}"))
        return None, state, issue

    next_state = ScanState(last_token=resolved[0]) if resolved else state

    try:
        pages = page_count(line)
    except InvalidRange as err:
        return None, next_state, LineIssue(index, err)

    if resolved:
        if pages is None and _is_heading(line):
            # Date heading: sets the date for the lines below it
            return None, next_state, None
        return AssignmentLine(raw_text=line, line_index=index, date_tokens=resolved,
                              page_count=pages), next_state, None

    if pages is None:
        return None, state, None

    if state.last_token is None:
        issue = LineIssue(index, UnresolvableDate("no date on this line or any line above it"))
        return None, state, issue

    return AssignmentLine(raw_text=line, line_index=index, date_tokens=[state.last_token],
                          page_count=pages, inherited_date=True), state, None


def scan(text: str, resolver: DateResolver) -> Iterator[Union[AssignmentLine, LineIssue]]:
    """Yield candidate lines and per-line issues in document order."""
    state = ScanState()
    for index, raw in enumerate(unwrap_hyphenation(text).splitlines()):
        line, state, issue = classify_line(raw, index, state, resolver)
        if issue is not None:
            logger.warning("%s", issue.describe())
            yield issue
        if line is not None:
            yield line


def classify(text: str, resolver: DateResolver) -> Iterator[AssignmentLine]:
    """Yield only the candidate lines, dropping issues."""
    for item in scan(text, resolver):
        if isinstance(item, AssignmentLine):
            yield item
