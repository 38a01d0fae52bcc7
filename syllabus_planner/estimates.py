"""
Estimate calculation module.

Turns a draft task into estimated study minutes, in strict priority order:
1. an explicit estimate on the task
2. pages x effective minutes-per-page + a fixed context-switch overhead
3. a default that is flagged as a guess

Course profiles and global settings are passed in by the caller.
"""

import math
from typing import Mapping, Optional

from .config import PlannerSettings
from .course_matching import normalize
from .models import CourseMppProfile, EstimateResult, clamp_mpp

DEFAULT_BASELINE_MPP = 2.0
OVERHEAD_MINUTES = 10
FALLBACK_MINUTES = 30


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def effective_mpp(profile: Optional[CourseMppProfile],
                  baseline_mpp: float = DEFAULT_BASELINE_MPP) -> float:
    """Minutes per page to use for a course.

    An enabled, positive override wins, then the learned value, then the
    global baseline. The result is always within [0.5, 6.0].
    """
    if profile is not None:
        if profile.override_enabled and profile.override_mpp:
            return profile.override_mpp
        if profile.minutes_per_page:
            return profile.minutes_per_page
    return clamp_mpp(baseline_mpp)


def _pages(item) -> int:
    # Tasks carry pages_read, backlog items carry pages
    pages = getattr(item, "pages_read", None) or getattr(item, "pages", None) or 0
    return max(0, int(pages))


def estimate(draft, profile: Optional[CourseMppProfile] = None,
             baseline_mpp: float = DEFAULT_BASELINE_MPP,
             overhead_minutes: int = OVERHEAD_MINUTES,
             fallback_minutes: int = FALLBACK_MINUTES) -> EstimateResult:
    """Estimate minutes for a draft task.

    Args:
        draft: TaskDraft (or anything with estimated_minutes and pages_read)
        profile: Minutes-per-page profile for the draft's course, if any
        baseline_mpp: Global minutes per page when there is no profile
        overhead_minutes: Added to every page-based estimate
        fallback_minutes: Used when nothing else is known

    Returns:
        EstimateResult; guessed is True only for the fallback
    """
    explicit = max(0, round_half_up(float(getattr(draft, "estimated_minutes", None) or 0)))
    if explicit > 0:
        return EstimateResult(minutes=explicit, guessed=False)

    pages = _pages(draft)
    if pages > 0:
        mpp = effective_mpp(profile, baseline_mpp)
        return EstimateResult(minutes=round_half_up(pages * mpp + overhead_minutes), guessed=False)

    return EstimateResult(minutes=fallback_minutes, guessed=True)


class Estimator:
    """Estimates drafts using injected settings and per-course profiles."""

    def __init__(self, settings: Optional[PlannerSettings] = None,
                 profiles: Optional[Mapping[str, CourseMppProfile]] = None):
        """Initialize estimator.

        Args:
            settings: Global settings (defaults to PlannerSettings())
            profiles: Normalized course key -> profile
        """
        self.settings = settings or PlannerSettings()
        self.profiles = dict(profiles or {})

    def profile_for(self, course: Optional[str]) -> Optional[CourseMppProfile]:
        key = normalize(course)
        return self.profiles.get(key) if key else None

    def estimate(self, draft) -> EstimateResult:
        return estimate(
            draft,
            self.profile_for(getattr(draft, "course", None)),
            baseline_mpp=self.settings.baseline_mpp,
            overhead_minutes=self.settings.overhead_minutes,
            fallback_minutes=self.settings.fallback_minutes,
        )
