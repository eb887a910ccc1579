"""Triage and alert result models — the contract between the SDK and callers.

``TriageResult`` is what the engine returns for a report.  ``AlertDecision``
is derived from it and handed to the dispatcher, which delivers the payload
and discards it.  Neither is persisted by the SDK.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from postop_triage.models.enums import AlertChannelName, TriageLevel


class TriageResult(BaseModel):
    """Engine output for one set of normalized signals.

    ``contributions`` lists the points each rule added before clamping,
    keyed by rule name (``pain``, ``fever_boost``, ``keyword:dyspnea``...).
    ``overrides`` names the hard-override conditions that forced the
    emergency tier, empty when the level came from the score alone.
    """

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    level: TriageLevel
    patient_message: str
    contributions: dict[str, float] = Field(default_factory=dict)
    overrides: tuple[str, ...] = ()


class AlertPayload(BaseModel):
    """Bounded summary of a triaged report for delivery to clinical staff."""

    model_config = ConfigDict(frozen=True)

    patient_id: str | None = None
    level: TriageLevel
    score: int
    # Free text truncated to ALERT_EXCERPT_LIMIT characters
    excerpt: str = ""
    timestamp: datetime

    # --- Optional context for the care team ---
    patient_name: str = ""
    phone: str = ""
    procedure: str = ""
    days_post_op: float = 0.0
    record_id: str | None = None
    case_url: str | None = None


class AlertDecision(BaseModel):
    """Whether and where to notify staff about one triage result."""

    model_config = ConfigDict(frozen=True)

    should_alert: bool
    channels: frozenset[AlertChannelName] = frozenset()
    payload: AlertPayload | None = None
