"""Triage constants shared across the SDK.

Rule weights are fixed so that scores stay comparable across deployments.
Classification thresholds and override cut-offs can be overridden via
environment variables so that clinics can tune escalation without code
changes; they are read once at import time.
"""

import os

# --- Structured-signal weights (fractions of a 100-point scale) ---
# pain 40%, bleeding 20%, fever 20%, purulence 15%, days post-op 5%
PAIN_WEIGHT = 0.40
BLEEDING_WEIGHT = 0.20
# "present" (non-active) bleeding scores a fraction of the active weight
BLEEDING_PRESENT_WEIGHT = 0.08
FEVER_WEIGHT = 0.20
PURULENCE_WEIGHT = 0.15
DAYS_WEIGHT = 0.05

# Fever normalisation: (temp - FEVER_BASELINE_C) / FEVER_SPAN_C, clamped 0..1
FEVER_BASELINE_C = 36.0
FEVER_SPAN_C = 4.0

# Flat bonus for any fever at or above FEVER_BOOST_C, on top of the scaled
# fever contribution.
FEVER_BOOST_C = 38.0
FEVER_BOOST_POINTS = 25.0

# Flat points for the structured breathing-difficulty flag.
BREATHING_POINTS = 70.0

# Days post-op saturate at this horizon.
DAYS_HORIZON = 30.0

# --- Classification thresholds (score >= threshold) ---
EMERGENCY_SCORE_THRESHOLD = int(os.getenv("EMERGENCY_SCORE_THRESHOLD", "70"))
URGENT_SCORE_THRESHOLD = int(os.getenv("URGENT_SCORE_THRESHOLD", "45"))
REVIEW_SCORE_THRESHOLD = int(os.getenv("REVIEW_SCORE_THRESHOLD", "20"))


def check_score_thresholds(emergency: int, urgent: int, review: int) -> None:
    """Raise ``ValueError`` unless the thresholds are strictly descending."""
    if not emergency > urgent > review:
        raise ValueError(
            "Score thresholds must satisfy EMERGENCY > URGENT > REVIEW, got "
            f"{emergency} / {urgent} / {review}"
        )


check_score_thresholds(
    EMERGENCY_SCORE_THRESHOLD, URGENT_SCORE_THRESHOLD, REVIEW_SCORE_THRESHOLD,
)

# --- Hard overrides that force the emergency tier ---
PAIN_OVERRIDE_SCALE = float(os.getenv("PAIN_OVERRIDE_SCALE", "8"))
FEVER_OVERRIDE_C = float(os.getenv("FEVER_OVERRIDE_C", "38.0"))

# --- Score bounds ---
SCORE_MIN = 0
SCORE_MAX = 100

# --- Normalizer ranges ---
PAIN_MIN = 0.0
PAIN_MAX = 10.0
TEMPERATURE_MIN_C = 30.0
TEMPERATURE_MAX_C = 45.0

# Maximum number of free-text characters carried in an alert payload.
ALERT_EXCERPT_LIMIT = 280
