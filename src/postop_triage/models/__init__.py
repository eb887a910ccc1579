"""Public model re-exports for postop_triage.

Consumers should import from ``postop_triage.models`` rather than
reaching into sub-modules directly.
"""

# --- Enums ---
from postop_triage.models.enums import (
    LEVEL_ORDER,
    STAFF_ALERT_LEVELS,
    AlertChannelName,
    BleedingStatus,
    TriageLevel,
)

# --- Keyword table ---
from postop_triage.models.keywords import KeywordCategory, KeywordTableSchema

# --- Signals ---
from postop_triage.models.signals import NormalizedSignals, PatientContext

# --- Results ---
from postop_triage.models.triage import AlertDecision, AlertPayload, TriageResult

__all__ = [
    # Enums
    "LEVEL_ORDER",
    "STAFF_ALERT_LEVELS",
    "AlertChannelName",
    "BleedingStatus",
    "TriageLevel",
    # Keyword table
    "KeywordCategory",
    "KeywordTableSchema",
    # Signals
    "NormalizedSignals",
    "PatientContext",
    # Results
    "AlertDecision",
    "AlertPayload",
    "TriageResult",
]
