"""Syllabus text to dated, time-estimated study tasks."""

__version__ = "0.1.0"
