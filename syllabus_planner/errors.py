"""
Error types raised by the syllabus planner.

Only ExtractionEmpty is a top-level failure. UnresolvableDate and
InvalidRange describe problems with a single line; the pipeline collects
them as warnings and keeps going.
"""


class PlannerError(Exception):
    """Base class for all planner errors."""


class ExtractionEmpty(PlannerError):
    """The document had no usable text."""


class UnresolvableDate(PlannerError, ValueError):
    """A date token could not be turned into a concrete day."""


class InvalidRange(PlannerError, ValueError):
    """A page range runs backwards (e.g. pp. 30-10)."""


class ConfigurationError(PlannerError, ValueError):
    """Settings or course profiles are invalid (bad timezone, bad number)."""
