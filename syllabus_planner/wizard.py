"""
Syllabus import wizard.

Runs the full pipeline over extracted document text:
classify lines -> synthesize drafts -> estimate minutes.

build_preview() returns drafts plus warnings for review and never writes
anything. parse_syllabus() runs the same pipeline and hands the drafts to a
caller-supplied sink (the bulk-create collaborator), if one is given.
"""

import logging
from datetime import date, datetime
from typing import Callable, List, Mapping, Optional

from .config import PlannerSettings, validate_timezone
from .date_resolver import DateResolver, infer_term
from .errors import ExtractionEmpty
from .estimates import Estimator
from .line_classifier import scan
from .models import CourseMppProfile, LineIssue, PreviewResult, TaskDraft
from .task_synthesizer import synthesize

logger = logging.getLogger(__name__)

TaskSink = Callable[[List[TaskDraft]], object]


def _resolver_for(text: str, timezone: str, reference_year: Optional[int],
                  semester_start: Optional[date]) -> DateResolver:
    if reference_year is None and semester_start is not None:
        reference_year = semester_start.year
    if reference_year is None:
        term = infer_term(text)
        if term is not None:
            logger.info("Using term %s from document", term.term_name)
            reference_year = term.year
            semester_start = term.start_date
    if reference_year is None:
        reference_year = datetime.now(validate_timezone(timezone)).year
    return DateResolver(reference_year, timezone, semester_start)


def run_pipeline(text: str, course: Optional[str] = None,
                 timezone: Optional[str] = None,
                 reference_year: Optional[int] = None,
                 semester_start: Optional[date] = None,
                 settings: Optional[PlannerSettings] = None,
                 profiles: Optional[Mapping[str, CourseMppProfile]] = None,
                 preview_only: bool = True,
                 sink: Optional[TaskSink] = None) -> PreviewResult:
    """Parse document text into draft tasks.

    Args:
        text: Plain text extracted from the uploaded document
        course: Course to assign to every draft
        timezone: IANA timezone for due dates (defaults to settings.timezone)
        reference_year: Year for dates written without one. When omitted it
            comes from semester_start, then from a term like "Fall 2025" in
            the text, then from today's date.
        semester_start: Dates without a year land on or after this day
        settings: Global settings
        profiles: Per-course minutes-per-page profiles
        preview_only: When False, drafts are handed to sink
        sink: Bulk-create callable that receives the drafts

    Returns:
        PreviewResult with drafts in document order and per-line warnings

    Raises:
        ExtractionEmpty: If text is empty or only whitespace
    """
    if not text or not text.strip():
        raise ExtractionEmpty("no usable text in document")

    settings = settings or PlannerSettings()
    resolver = _resolver_for(text, timezone or settings.timezone, reference_year, semester_start)
    estimator = Estimator(settings, profiles)

    lines = []
    warnings = []
    for item in scan(text, resolver):
        if isinstance(item, LineIssue):
            warnings.append(item.describe())
        else:
            lines.append(item)

    tasks = synthesize(lines, resolver, estimator, course)
    logger.info("Parsed %d task(s) with %d warning(s)", len(tasks), len(warnings))

    if not preview_only and sink is not None:
        sink(list(tasks))
    return PreviewResult(tasks=tasks, warnings=warnings)


def build_preview(text: str, course: Optional[str] = None,
                  timezone: Optional[str] = None, **kwargs) -> PreviewResult:
    """Review-only preview of the tasks in a document.

    Never raises for empty input: returns no tasks and a single
    ExtractionEmpty warning instead.
    """
    try:
        return run_pipeline(text, course, timezone, preview_only=True, **kwargs)
    except ExtractionEmpty as err:
        return PreviewResult(tasks=[], warnings=[f"ExtractionEmpty: {err}"])


def parse_syllabus(text: str, course: Optional[str] = None,
                   timezone: Optional[str] = None,
                   sink: Optional[TaskSink] = None, **kwargs) -> List[TaskDraft]:
    """Parse a document straight to drafts, optionally submitting them.

    Raises:
        ExtractionEmpty: If text is empty or only whitespace
    """
    return run_pipeline(text, course, timezone, preview_only=False, sink=sink, **kwargs).tasks
