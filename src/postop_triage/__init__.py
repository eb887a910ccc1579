"""postop_triage — Rule-based post-operative triage SDK.

Public API:
    normalize        — raw webhook payload -> NormalizedSignals
    extract_context  — raw webhook payload -> PatientContext (non-scoring)
    TriageEngine     — scores and classifies NormalizedSignals
    classify         — TriageEngine.classify with the bundled keyword table
    KeywordTable     — loads the free-text keyword YAML
    decide           — TriageResult -> AlertDecision
    render_subject   — alert subject line
    render_body      — alert plain-text body

Channel interface:
    AlertChannel     — ABC implemented by outbound alert channels

Data models:
    NormalizedSignals, PatientContext, TriageResult, AlertDecision,
    AlertPayload, TriageLevel, BleedingStatus, AlertChannelName
"""

from postop_triage.alerts import build_case_url, decide, render_body, render_subject
from postop_triage.engine import TriageEngine, classify
from postop_triage.interfaces import AlertChannel
from postop_triage.keywords import KeywordTable
from postop_triage.models import (
    AlertChannelName,
    AlertDecision,
    AlertPayload,
    BleedingStatus,
    NormalizedSignals,
    PatientContext,
    TriageLevel,
    TriageResult,
)
from postop_triage.normalizer import extract_context, normalize

__all__ = [
    # Pipeline steps
    "normalize",
    "extract_context",
    "TriageEngine",
    "classify",
    "KeywordTable",
    "decide",
    "build_case_url",
    "render_subject",
    "render_body",
    # Interfaces
    "AlertChannel",
    # Models
    "AlertChannelName",
    "AlertDecision",
    "AlertPayload",
    "BleedingStatus",
    "NormalizedSignals",
    "PatientContext",
    "TriageLevel",
    "TriageResult",
]
