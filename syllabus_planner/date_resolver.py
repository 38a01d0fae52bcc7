"""
Date resolution module.

Finds date-like tokens in syllabus lines ("Jan 10", "1/10/2025",
"Mon, Sept 5", "Jan 10-12") and resolves them to concrete instants.

A missing year is inferred as the nearest occurrence on or after the
semester start. Every instant is local midnight in the caller's timezone,
returned in UTC. Anything ambiguous resolves to None instead of a guess.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional

import dateparser
import pytz

from .config import validate_timezone
from .models import DateSpan, DateToken

logger = logging.getLogger(__name__)

MONTH = (r"jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|"
         r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?")
WEEKDAY = (r"mon(?:day)?|tue(?:s(?:day)?)?|wed(?:nesday)?|thu(?:r(?:s(?:day)?)?)?|"
           r"fri(?:day)?|sat(?:urday)?|sun(?:day)?")
DASH = r"\s*[-–—]\s*"

# "Jan 10", "January 10, 2025", "Mon, Jan 10", "Jan 10-12", "Jan 30 - Feb 2, 2025"
NAME_TOKEN = re.compile(
    r"\b(?:(?P<weekday>" + WEEKDAY + r")\.?,?\s+)?"
    r"(?P<m1>" + MONTH + r")\.?\s+(?P<d1>\d{1,2})(?:st|nd|rd|th)?"
    r"(?:,?\s+(?P<y1>\d{4}))?"
    r"(?:" + DASH + r"(?:(?P<m2>" + MONTH + r")\.?\s+)?(?P<d2>\d{1,2})(?:st|nd|rd|th)?)?"
    r"(?:,?\s+(?P<y2>\d{4}))?"
    r"(?!\d)",
    re.IGNORECASE,
)

# "1/10", "01/10/2025", "1/10/25", "1/10-1/12", "1/10-12"
NUMERIC_TOKEN = re.compile(
    r"(?:\b(?P<weekday>" + WEEKDAY + r")\.?,?\s+)?"
    r"(?<![\d/.])(?P<m1>\d{1,2})/(?P<d1>\d{1,2})(?:/(?P<y1>\d{4}|\d{2}))?"
    r"(?:" + DASH + r"(?:(?P<m2>\d{1,2})/)?(?P<d2>\d{1,2})(?:/(?P<y2>\d{4}|\d{2}))?)?"
    r"(?![\d/])"
    r"(?!\s+of\b)",  # "1/2 of Chapter 3" is a fraction
    re.IGNORECASE,
)

MONTH_INDEX = {name: i for i, name in enumerate(
    ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"], start=1)}

WEEKDAY_INDEX = {"mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6}

# A token may land this far before the anchor and still count as "on/after" it
AMBIGUITY_TOLERANCE = timedelta(days=1)

_DATEPARSER_SETTINGS = {
    "DATE_ORDER": "MDY",
    "STRICT_PARSING": True,
    "PREFER_DAY_OF_MONTH": "first",
    "PARSERS": ["custom-formats", "absolute-time"],
}


def _year(raw: Optional[str]) -> Optional[int]:
    if not raw:
        return None
    value = int(raw)
    return value + 2000 if value < 100 else value


def _token_from_name_match(match) -> DateToken:
    m1 = match.group("m1")[:3].title()
    start_text = f"{m1} {int(match.group('d1'))}"
    end_text = None
    m2 = None
    if match.group("d2"):
        m2 = (match.group("m2") or m1)[:3].title()
        end_text = f"{m2} {int(match.group('d2'))}"
    return _build_token(match, start_text, end_text, _crosses_year(
        MONTH_INDEX[m1.lower()], MONTH_INDEX[m2.lower()] if m2 else None))


def _token_from_numeric_match(match) -> DateToken:
    m1 = int(match.group("m1"))
    start_text = f"{m1}/{int(match.group('d1'))}"
    end_text = None
    m2 = None
    if match.group("d2"):
        m2 = int(match.group("m2") or m1)
        end_text = f"{m2}/{int(match.group('d2'))}"
    return _build_token(match, start_text, end_text, _crosses_year(m1, m2))


def _crosses_year(start_month: int, end_month: Optional[int]) -> bool:
    return end_month is not None and end_month < start_month


def _build_token(match, start_text: str, end_text: Optional[str],
                 crosses_year: bool = False) -> DateToken:
    y1 = _year(match.group("y1"))
    y2 = _year(match.group("y2"))
    if y1:
        year, end_year = y1, y2
    elif y2 and crosses_year:
        # "Dec 29 - Jan 2, 2026": the trailing year belongs to the end
        year, end_year = y2 - 1, y2
    else:
        # A single trailing year covers the whole range
        year, end_year = y2, None
    return DateToken(
        text=match.group(0).strip(),
        start_text=start_text,
        end_text=end_text,
        year=year,
        end_year=end_year,
        weekday=match.group("weekday"),
    )


def find_date_tokens(text: str) -> List[DateToken]:
    """Find all date tokens in a line, in order of appearance.

    Args:
        text: One line of syllabus text

    Returns:
        List of DateToken objects (empty if the line has no dates)
    """
    found = []
    for match in NAME_TOKEN.finditer(text):
        found.append((match.start(), match.end(), _token_from_name_match(match)))
    for match in NUMERIC_TOKEN.finditer(text):
        found.append((match.start(), match.end(), _token_from_numeric_match(match)))
    found.sort(key=lambda item: item[0])

    tokens = []
    last_end = -1
    for start, end, token in found:
        if start < last_end:
            continue
        tokens.append(token)
        last_end = end
    return tokens


def strip_date_tokens(text: str) -> str:
    """Remove every date token from a line."""
    text = NAME_TOKEN.sub(" ", text)
    return NUMERIC_TOKEN.sub(" ", text)


class DateResolver:
    """Resolves date tokens to UTC instants for one document."""

    def __init__(self, reference_year: int, timezone: str,
                 semester_start: Optional[date] = None):
        """Initialize resolver.

        Args:
            reference_year: Year used when a token has none and no semester
                start is given
            timezone: IANA timezone name; instants are local midnight there
            semester_start: First day of the semester. Tokens without a year
                resolve to the nearest occurrence on or after this day.
        """
        self.reference_year = reference_year
        self.timezone = timezone
        self.tz = validate_timezone(timezone)
        self.semester_start = semester_start or date(reference_year, 1, 1)

    def resolve(self, token: DateToken) -> Optional[DateSpan]:
        """Resolve a token to its boundary instants.

        Args:
            token: Token from find_date_tokens

        Returns:
            DateSpan (start == end for single dates), or None when the token
            is invalid or ambiguous
        """
        start = self._resolve_day(token.start_text, token.year, self.semester_start,
                                  AMBIGUITY_TOLERANCE)
        if start is None:
            logger.debug("Could not resolve %r", token.text)
            return None

        if token.weekday and not self._weekday_agrees(token.weekday, start):
            logger.debug("Weekday %r disagrees with %s in %r", token.weekday, start, token.text)
            return None

        end = start
        if token.end_text:
            end = self._resolve_end(token, start)
            if end is None or end < start:
                logger.debug("Range %r does not run forward", token.text)
                return None

        return DateSpan(start=self.to_utc(start), end=self.to_utc(end))

    def to_utc(self, day: date) -> datetime:
        """Local midnight of day in the resolver's timezone, as UTC."""
        local = self.tz.localize(datetime.combine(day, time.min))
        return local.astimezone(pytz.utc)

    def _resolve_day(self, text: str, year: Optional[int], anchor: date,
                     tolerance: timedelta) -> Optional[date]:
        if year is not None:
            return self._parse(text, year)
        earliest = anchor - tolerance
        for candidate in (anchor.year, anchor.year + 1):
            day = self._parse(text, candidate)
            if day is not None and day >= earliest:
                return day
        return None

    def _resolve_end(self, token: DateToken, start: date) -> Optional[date]:
        if token.end_year is not None:
            return self._parse(token.end_text, token.end_year)
        end = self._parse(token.end_text, start.year)
        if end is not None and end < start and end.month < start.month:
            # "Dec 28 - Jan 3" runs into the next year
            end = self._parse(token.end_text, start.year + 1)
        return end

    def _parse(self, text: str, year: int) -> Optional[date]:
        separator = "/" if "/" in text else " "
        try:
            parsed = dateparser.parse(f"{text}{separator}{year}", languages=["en"],
                                      settings=_DATEPARSER_SETTINGS)
        except (ValueError, OverflowError):
            return None
        if parsed is None or parsed.year != year:
            return None
        if separator == "/":
            month, day = (int(part) for part in text.split("/"))
            if (parsed.month, parsed.day) != (month, day):
                return None
        return parsed.date()

    @staticmethod
    def _weekday_agrees(weekday: str, day: date) -> bool:
        named = WEEKDAY_INDEX.get(weekday[:3].lower())
        if named is None:
            return True
        diff = (day.weekday() - named) % 7
        return min(diff, 7 - diff) <= AMBIGUITY_TOLERANCE.days


def resolve(token: DateToken, reference_year: int, timezone: str,
            semester_start: Optional[date] = None) -> Optional[DateSpan]:
    """Convenience function to resolve a single token."""
    return DateResolver(reference_year, timezone, semester_start).resolve(token)


@dataclass(frozen=True)
class TermInfo:
    """Academic term named in a document, e.g. "Fall 2025"."""
    term_name: str
    year: int
    start_date: date


TERM_PATTERNS = [
    r"(Fall|Winter|Spring|Summer)\s+(\d{4})",  # "Fall 2025"
    r"(Fall|Winter|Spring|Summer)\s+Term\s+(\d{4})",  # "Fall Term 2025"
    r"(Fall|Winter|Spring|Summer)\s+Semester\s+(\d{4})",  # "Fall Semester 2025"
]

# Typical first day of each term when the document does not say
TERM_DEFAULT_START = {
    "Fall": (8, 15),
    "Winter": (1, 5),
    "Spring": (1, 5),
    "Summer": (5, 1),
}


def infer_term(text: str, search_lines: int = 40) -> Optional[TermInfo]:
    """Look for a term name near the top of a document.

    Args:
        text: Document text
        search_lines: How many leading lines to search

    Returns:
        TermInfo with a default start date for the season, or None
    """
    head = "\n".join(text.splitlines()[:search_lines])
    for pattern in TERM_PATTERNS:
        match = re.search(pattern, head, re.IGNORECASE)
        if match:
            season = match.group(1).title()
            year = int(match.group(2))
            month, day = TERM_DEFAULT_START[season]
            return TermInfo(term_name=f"{season} {year}", year=year,
                            start_date=date(year, month, day))
    return None
