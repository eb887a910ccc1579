"""TriageEngine — deterministic scoring and classification of normalized signals.

The engine is a pure function of its input: no I/O, no clock, no
randomness.  The same :class:`NormalizedSignals` always yields the same
:class:`TriageResult`, which is what makes the scoring auditable.

Scoring is a sum of independent contributions, each computed from a
normalized signal:

    pain          pain/10 * 100 * PAIN_WEIGHT
    bleeding      100 * BLEEDING_WEIGHT (active) | 100 * BLEEDING_PRESENT_WEIGHT
    fever         clamp((t - 36) / 4, 0, 1) * 100 * FEVER_WEIGHT
    fever_boost   FEVER_BOOST_POINTS when t >= FEVER_BOOST_C
    purulence     100 * PURULENCE_WEIGHT
    days_post_op  min(days / 30, 1) * 100 * DAYS_WEIGHT
    breathing     BREATHING_POINTS
    keyword:<id>  points of each matched keyword category

Free-text evidence is additive with structured evidence: a patient who
ticks "bleeding" *and* writes "chảy máu" scores both.

The total is clamped to 0..100 and rounded half-up.  Classification then
applies hard overrides (any one forces ``emergency``) before falling back
to the score thresholds.
"""

from __future__ import annotations

import math
from functools import lru_cache

from postop_triage.constants import (
    BLEEDING_PRESENT_WEIGHT,
    BLEEDING_WEIGHT,
    BREATHING_POINTS,
    DAYS_HORIZON,
    DAYS_WEIGHT,
    EMERGENCY_SCORE_THRESHOLD,
    FEVER_BASELINE_C,
    FEVER_BOOST_C,
    FEVER_BOOST_POINTS,
    FEVER_OVERRIDE_C,
    FEVER_SPAN_C,
    FEVER_WEIGHT,
    PAIN_MAX,
    PAIN_OVERRIDE_SCALE,
    PAIN_WEIGHT,
    PURULENCE_WEIGHT,
    REVIEW_SCORE_THRESHOLD,
    SCORE_MAX,
    SCORE_MIN,
    URGENT_SCORE_THRESHOLD,
)
from postop_triage.keywords import KeywordTable
from postop_triage.messages import message_for
from postop_triage.models.enums import BleedingStatus, TriageLevel
from postop_triage.models.signals import NormalizedSignals
from postop_triage.models.triage import TriageResult

# Score thresholds, checked from most to least severe; first met wins.
SCORE_BANDS: list[tuple[int, TriageLevel]] = [
    (EMERGENCY_SCORE_THRESHOLD, TriageLevel.EMERGENCY),
    (URGENT_SCORE_THRESHOLD, TriageLevel.URGENT_REVIEW),
    (REVIEW_SCORE_THRESHOLD, TriageLevel.ROUTINE_REVIEW),
]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def level_for_score(score: int) -> TriageLevel:
    """Map a clamped score onto a level using :data:`SCORE_BANDS`."""
    for threshold, level in SCORE_BANDS:
        if score >= threshold:
            return level
    return TriageLevel.ROUTINE


class TriageEngine:
    """Scores and classifies normalized signals.

    Args:
        keywords: a loaded :class:`KeywordTable`; shared read-only across
            requests
    """

    def __init__(self, keywords: KeywordTable) -> None:
        self._keywords = keywords

    @property
    def keywords(self) -> KeywordTable:
        return self._keywords

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def classify(self, signals: NormalizedSignals) -> TriageResult:
        """Score *signals*, pick a level, and attach the patient message."""
        contributions = self.contributions(signals)
        total = sum(contributions.values())
        score = _round_half_up(min(max(total, SCORE_MIN), SCORE_MAX))

        overrides = self.overrides(signals)
        level = TriageLevel.EMERGENCY if overrides else level_for_score(score)

        return TriageResult(
            score=score,
            level=level,
            patient_message=message_for(level),
            contributions=contributions,
            overrides=overrides,
        )

    def contributions(self, signals: NormalizedSignals) -> dict[str, float]:
        """Return the non-zero points each rule adds, keyed by rule name."""
        points: dict[str, float] = {}

        # --- Structured signals ---
        if signals.pain_scale > 0:
            points["pain"] = signals.pain_scale / PAIN_MAX * 100 * PAIN_WEIGHT

        if signals.bleeding_status is BleedingStatus.ACTIVE:
            points["bleeding"] = 100 * BLEEDING_WEIGHT
        elif signals.bleeding_status is BleedingStatus.PRESENT:
            points["bleeding"] = 100 * BLEEDING_PRESENT_WEIGHT

        temp = signals.temperature_c
        if temp is not None:
            fever_norm = min(max((temp - FEVER_BASELINE_C) / FEVER_SPAN_C, 0.0), 1.0)
            if fever_norm > 0:
                points["fever"] = fever_norm * 100 * FEVER_WEIGHT
            if temp >= FEVER_BOOST_C:
                points["fever_boost"] = FEVER_BOOST_POINTS

        if signals.purulence:
            points["purulence"] = 100 * PURULENCE_WEIGHT

        if signals.days_post_op > 0:
            days_factor = min(signals.days_post_op / DAYS_HORIZON, 1.0)
            points["days_post_op"] = days_factor * 100 * DAYS_WEIGHT

        if signals.breathing_difficulty:
            points["breathing"] = BREATHING_POINTS

        # --- Free text ---
        for category in self._keywords.match(signals.free_text):
            points[f"keyword:{category.id}"] = category.points

        return points

    def overrides(self, signals: NormalizedSignals) -> tuple[str, ...]:
        """Return the hard-override conditions present in *signals*.

        Any one of these forces the emergency tier regardless of score.
        """
        fired: list[str] = []
        if signals.breathing_difficulty:
            fired.append("breathing_difficulty")
        if signals.bleeding_status is BleedingStatus.ACTIVE:
            fired.append("active_bleeding")
        if signals.pain_scale >= PAIN_OVERRIDE_SCALE:
            fired.append("pain")
        if signals.temperature_c is not None and signals.temperature_c >= FEVER_OVERRIDE_C:
            fired.append("fever")
        for category in self._keywords.match(signals.free_text):
            if category.override:
                fired.append(f"keyword:{category.id}")
        return tuple(fired)


# ------------------------------------------------------------------
# Module-level convenience using the bundled keyword table
# ------------------------------------------------------------------

@lru_cache(maxsize=1)
def default_engine() -> TriageEngine:
    """Return a process-wide engine backed by the bundled keyword table."""
    return TriageEngine(KeywordTable().load())


def classify(signals: NormalizedSignals) -> TriageResult:
    """Classify *signals* with the bundled keyword table."""
    return default_engine().classify(signals)
