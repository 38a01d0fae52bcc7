"""
Page range utilities.

Handles page references in syllabus lines ("pp. 10-25", "p. 7",
"pages 241-250, 107-111", "pp. xiii-xvii", "read 25 pages") and the
arithmetic on them.
"""

import re
from typing import List, Optional

from .errors import InvalidRange
from .models import PageRange

# Front-matter page numbers, i to cccxcix
_ROMAN = r"c{0,3}(?:xc|xl|l?x{0,3})(?:ix|iv|v?i{0,3})"
ROMAN_NUMERAL = re.compile(r"^" + _ROMAN + r"$", re.IGNORECASE)
_ROMAN_VALUES = {"i": 1, "v": 5, "x": 10, "l": 50, "c": 100}

_NUMBER = r"(?:\d+(?![\d/])|(?-i:(?=[ivxlc])" + _ROMAN + r"(?<=[ivxlc]))\b)"
_RANGE = _NUMBER + r"(?:\s*[-–—]\s*" + _NUMBER + r")?"

# "pp. 10-25", "p. 7", "pages 10-20, 31-35 and 40", "pp. xiii-xvii"
PAGE_REFERENCE = re.compile(
    r"\b(?:pp?\.|pages?)\s*(?P<spec>" + _RANGE + r"(?:\s*(?:,|and|&)\s*" + _RANGE + r")*)",
    re.IGNORECASE,
)

# "read 25 pages"
PAGE_COUNT = re.compile(r"\b(?P<count>\d{1,4})\s+pages?\b", re.IGNORECASE)

# Text allowed between a page reference and a count that restates it,
# e.g. "pp. 10-12 (3 pages)"
_RESTATED_GAP = re.compile(r"[\s(\[,:;–—-]*")

_SPEC_PART = re.compile(r"^(\w+)(?:\s*-\s*(\w+))?$")


def roman_to_int(numeral: str) -> Optional[int]:
    """Value of a lowercase or uppercase roman numeral, or None if invalid."""
    s = numeral.strip().lower()
    if not s or not ROMAN_NUMERAL.match(s):
        return None
    total = 0
    previous = 0
    for ch in reversed(s):
        value = _ROMAN_VALUES[ch]
        if value < previous:
            total -= value
        else:
            total += value
            previous = value
    return total


def _page_number(text: str) -> Optional[int]:
    return int(text) if text.isdigit() else roman_to_int(text)


def parse_page_spec(spec: str, strict: bool = True) -> List[PageRange]:
    """Parse the part after "pp." into ranges.

    Args:
        spec: Text like "241-250, 107-111" or "7"
        strict: Raise InvalidRange on a backwards range instead of skipping it

    Returns:
        List of PageRange objects in the order written
    """
    s = re.sub(r"[–—]", "-", spec)
    s = re.sub(r"\band\b|&", ",", s, flags=re.IGNORECASE)
    ranges = []
    for part in (p.strip() for p in re.split(r"[,;]", s)):
        match = _SPEC_PART.match(part)
        if not match:
            continue
        start = _page_number(match.group(1))
        end = _page_number(match.group(2)) if match.group(2) else start
        if start is None or end is None:
            continue
        if start > end:
            if strict:
                raise InvalidRange(f"page range {start}-{end} runs backwards")
            continue
        ranges.append(PageRange(start, end))
    return ranges


def parse_page_ranges(text: str) -> List[PageRange]:
    """Leniently parse a page range string, skipping anything invalid.

    Accepts an optional "p."/"pp."/"pages" prefix.
    """
    if not text:
        return []
    s = re.sub(r"^p(?:ages?|p)?\.?\s*", "", text.strip(), flags=re.IGNORECASE)
    return parse_page_spec(s, strict=False)


def find_page_ranges(line: str) -> List[PageRange]:
    """All page ranges referenced in a line.

    Raises:
        InvalidRange: If any range runs backwards
    """
    ranges = []
    for match in PAGE_REFERENCE.finditer(line):
        ranges.extend(parse_page_spec(match.group("spec")))
    return ranges


def page_count(line: str) -> Optional[int]:
    """Total pages referenced in a line, or None if it names no pages.

    Ranges count |end - start| + 1, "N pages" counts N, and multiple
    references are summed. A count that only restates the reference before
    it ("pp. 10-12 (3 pages)") is not added again.

    Raises:
        InvalidRange: If any range runs backwards
    """
    references = list(PAGE_REFERENCE.finditer(line))
    ranges = []
    for match in references:
        ranges.extend(parse_page_spec(match.group("spec")))
    counts = [int(m.group("count")) for m in PAGE_COUNT.finditer(line)
              if not _restates(line, m, references)]
    if not references and not counts:
        return None
    return count_pages(ranges) + sum(counts)


def _restates(line: str, count, references) -> bool:
    return any(ref.start() <= count.start()
               and _RESTATED_GAP.fullmatch(line[ref.end():count.start()])
               for ref in references)


def has_page_reference(line: str) -> bool:
    return bool(PAGE_REFERENCE.search(line) or PAGE_COUNT.search(line))


def strip_page_references(line: str) -> str:
    """Remove page references from a line."""
    return PAGE_COUNT.sub(" ", PAGE_REFERENCE.sub(" ", line))


def count_pages(ranges: List[PageRange]) -> int:
    return sum(r.count for r in ranges)


def format_page_ranges(ranges: List[PageRange]) -> str:
    """Format ranges back to text, e.g. "241–250, 107"."""
    return ", ".join(str(r.start) if r.start == r.end else f"{r.start}–{r.end}" for r in ranges)


def subtract_pages(ranges: List[PageRange], completed: str) -> List[PageRange]:
    """Remove already-read pages from a list of ranges.

    Example:
        ranges [241-250, 107-111] minus "241-247" gives [248-250, 107-111]

    Args:
        ranges: Assigned page ranges
        completed: Text naming the pages already read

    Returns:
        The ranges still left to read, split where needed
    """
    done = set()
    for r in parse_page_ranges(completed):
        done.update(range(r.start, r.end + 1))
    if not done:
        return list(ranges)

    remaining = []
    for r in ranges:
        run_start = None
        for page in range(r.start, r.end + 2):
            skip = page in done or page > r.end
            if not skip and run_start is None:
                run_start = page
            elif skip and run_start is not None:
                remaining.append(PageRange(run_start, page - 1))
                run_start = None
    return remaining
