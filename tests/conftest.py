"""Shared fixtures for planner tests."""

from datetime import date

import pytest

from syllabus_planner.date_resolver import DateResolver


@pytest.fixture
def resolver():
    """Resolver for a spring 2025 syllabus in Chicago."""
    return DateResolver(2025, "America/Chicago")


@pytest.fixture
def fall_resolver():
    """Resolver anchored on an August semester start."""
    return DateResolver(2025, "America/Chicago", semester_start=date(2025, 8, 15))


@pytest.fixture(autouse=True)
def clear_planner_env(monkeypatch):
    """Keep PLANNER_* variables from the host out of the tests."""
    for name in ("PLANNER_MINUTES_PER_PAGE", "PLANNER_WINDOW_DAYS", "PLANNER_TIMEZONE"):
        monkeypatch.delenv(name, raising=False)
