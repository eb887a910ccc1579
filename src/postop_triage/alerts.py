"""Alert decision and rendering — what to tell clinical staff, and where.

:func:`decide` is a pure step: it looks only at the triage level and the
set of channels the deployment has configured.  Delivery lives in the
server's dispatcher, which hands the payload to each channel and discards
it afterwards.

The render helpers produce the plain-text subject and body shared by every
channel so that the bot message and the email read the same.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from postop_triage.constants import ALERT_EXCERPT_LIMIT
from postop_triage.models.enums import STAFF_ALERT_LEVELS, AlertChannelName
from postop_triage.models.signals import PatientContext
from postop_triage.models.triage import AlertDecision, AlertPayload, TriageResult

_ELLIPSIS = "…"


def truncate_excerpt(text: str, limit: int = ALERT_EXCERPT_LIMIT) -> str:
    """Trim *text* to at most *limit* characters, marking the cut with an ellipsis."""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + _ELLIPSIS


def build_case_url(dashboard_url: str | None, record_id: str | None) -> str | None:
    """Return ``{dashboard}/cases/{id}``, or ``None`` if either part is missing."""
    if not dashboard_url or not record_id:
        return None
    return f"{dashboard_url.rstrip('/')}/cases/{record_id}"


def decide(
    result: TriageResult,
    *,
    patient_id: str | None,
    raw_excerpt: str,
    timestamp: datetime,
    available_channels: Iterable[AlertChannelName],
    context: PatientContext | None = None,
    days_post_op: float = 0.0,
    record_id: str | None = None,
    case_url: str | None = None,
) -> AlertDecision:
    """Decide whether *result* should page staff and build the payload.

    ``should_alert`` is true for every level in
    :data:`~postop_triage.models.enums.STAFF_ALERT_LEVELS`.  ``channels`` is
    the configured channel set when alerting, otherwise empty.  The payload
    is only built when an alert is wanted.
    """
    if result.level not in STAFF_ALERT_LEVELS:
        return AlertDecision(should_alert=False)

    context = context or PatientContext()
    payload = AlertPayload(
        patient_id=patient_id,
        level=result.level,
        score=result.score,
        excerpt=truncate_excerpt(raw_excerpt),
        timestamp=timestamp,
        patient_name=context.name,
        phone=context.phone,
        procedure=context.procedure,
        days_post_op=days_post_op,
        record_id=record_id,
        case_url=case_url,
    )
    return AlertDecision(
        should_alert=True,
        channels=frozenset(available_channels),
        payload=payload,
    )


# ------------------------------------------------------------------
# Rendering
# ------------------------------------------------------------------

def _who(payload: AlertPayload) -> str:
    return payload.patient_name or payload.patient_id or "Unknown"


def render_subject(payload: AlertPayload) -> str:
    """One-line subject, e.g. ``[ALERT] Postop EMERGENCY - Nguyen Van A``."""
    level = payload.level.value.replace("_", " ").upper()
    return f"[ALERT] Postop {level} - {_who(payload)}"


def render_body(payload: AlertPayload) -> str:
    """Plain-text alert body shared by the messaging and email channels."""
    days = f"{payload.days_post_op:g}"
    lines = [
        f"Patient: {payload.patient_name or 'N/A'} ({payload.patient_id or 'N/A'})",
        f"Phone: {payload.phone or 'N/A'}",
        f"Procedure: {payload.procedure or 'N/A'}  Days post-op: {days}",
        f"Score: {payload.score}  Level: {payload.level.value}",
        f"Notes: {payload.excerpt or 'N/A'}",
    ]
    if payload.case_url:
        lines.append(f"Case link: {payload.case_url}")
    elif payload.record_id:
        lines.append(f"Record: {payload.record_id}")
    lines.append(f"Timestamp: {payload.timestamp.isoformat()}")
    return "\n".join(lines)
