"""Alert decision and rendering tests."""

from datetime import datetime, timezone

import pytest

from postop_triage.alerts import (
    build_case_url,
    decide,
    render_body,
    render_subject,
    truncate_excerpt,
)
from postop_triage.messages import message_for
from postop_triage.models.enums import AlertChannelName, TriageLevel
from postop_triage.models.signals import PatientContext
from postop_triage.models.triage import AlertPayload, TriageResult

NOW = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)
BOTH = {AlertChannelName.MESSAGING, AlertChannelName.EMAIL}


def result_for(level: TriageLevel, score: int = 50) -> TriageResult:
    return TriageResult(score=score, level=level, patient_message=message_for(level))


def payload(**overrides) -> AlertPayload:
    fields = dict(
        patient_id="BN-9",
        level=TriageLevel.EMERGENCY,
        score=82,
        excerpt="khó thở",
        timestamp=NOW,
    )
    fields.update(overrides)
    return AlertPayload(**fields)


# =====================================================================
# decide()
# =====================================================================


class TestDecide:

    @pytest.mark.parametrize("level", [TriageLevel.ROUTINE, TriageLevel.ROUTINE_REVIEW])
    def test_low_levels_do_not_alert(self, level):
        decision = decide(
            result_for(level), patient_id="p", raw_excerpt="x",
            timestamp=NOW, available_channels=BOTH,
        )
        assert decision.should_alert is False
        assert decision.channels == frozenset()
        assert decision.payload is None

    @pytest.mark.parametrize("level", [TriageLevel.URGENT_REVIEW, TriageLevel.EMERGENCY])
    def test_high_levels_alert_on_every_configured_channel(self, level):
        decision = decide(
            result_for(level, 75), patient_id="p", raw_excerpt="đau nhiều",
            timestamp=NOW, available_channels=BOTH,
        )
        assert decision.should_alert is True
        assert decision.channels == frozenset(BOTH)
        assert decision.payload.level is level
        assert decision.payload.score == 75
        assert decision.payload.excerpt == "đau nhiều"
        assert decision.payload.timestamp == NOW

    def test_no_configured_channels(self):
        decision = decide(
            result_for(TriageLevel.EMERGENCY), patient_id=None, raw_excerpt="",
            timestamp=NOW, available_channels=[],
        )
        assert decision.should_alert is True
        assert decision.channels == frozenset()
        assert decision.payload is not None

    def test_context_is_carried(self):
        decision = decide(
            result_for(TriageLevel.URGENT_REVIEW),
            patient_id="BN-9",
            raw_excerpt="sưng",
            timestamp=NOW,
            available_channels=[AlertChannelName.EMAIL],
            context=PatientContext(name="Trần Thị B", phone="0909", procedure="Mổ ruột thừa"),
            days_post_op=3,
            record_id="rec-1",
            case_url="https://dash.test/cases/rec-1",
        )
        p = decision.payload
        assert (p.patient_name, p.phone, p.procedure) == ("Trần Thị B", "0909", "Mổ ruột thừa")
        assert p.days_post_op == 3
        assert p.record_id == "rec-1"
        assert p.case_url == "https://dash.test/cases/rec-1"

    def test_excerpt_is_bounded(self):
        decision = decide(
            result_for(TriageLevel.EMERGENCY), patient_id="p", raw_excerpt="a" * 600,
            timestamp=NOW, available_channels=BOTH,
        )
        assert len(decision.payload.excerpt) == 280


# =====================================================================
# Helpers
# =====================================================================


class TestHelpers:

    def test_truncate_short_text_unchanged(self):
        assert truncate_excerpt("  ngắn  ") == "ngắn"

    def test_truncate_marks_cut(self):
        text = truncate_excerpt("x" * 300)
        assert len(text) == 280
        assert text.endswith("…")

    def test_truncate_custom_limit(self):
        assert truncate_excerpt("abcdefgh", limit=5) == "abcd…"

    @pytest.mark.parametrize("base,record,expected", [
        ("https://dash.test", "r1", "https://dash.test/cases/r1"),
        ("https://dash.test/", "r1", "https://dash.test/cases/r1"),
        (None, "r1", None),
        ("https://dash.test", None, None),
        ("", "r1", None),
    ])
    def test_build_case_url(self, base, record, expected):
        assert build_case_url(base, record) == expected


# =====================================================================
# Rendering
# =====================================================================


class TestRendering:

    def test_subject_uses_name_then_id(self):
        assert render_subject(payload(patient_name="Nguyen Van A")) == (
            "[ALERT] Postop EMERGENCY - Nguyen Van A"
        )
        assert render_subject(payload(level=TriageLevel.URGENT_REVIEW)) == (
            "[ALERT] Postop URGENT REVIEW - BN-9"
        )
        assert render_subject(payload(patient_id=None)) == "[ALERT] Postop EMERGENCY - Unknown"

    def test_body_fields(self):
        body = render_body(payload(phone="0909", procedure="Cắt túi mật", days_post_op=2))
        assert "Patient: N/A (BN-9)" in body
        assert "Phone: 0909" in body
        assert "Procedure: Cắt túi mật  Days post-op: 2" in body
        assert "Score: 82  Level: emergency" in body
        assert "Notes: khó thở" in body
        assert body.endswith(f"Timestamp: {NOW.isoformat()}")

    def test_body_prefers_case_link(self):
        body = render_body(payload(record_id="r1", case_url="https://dash.test/cases/r1"))
        assert "Case link: https://dash.test/cases/r1" in body
        assert "Record:" not in body

    def test_body_falls_back_to_record_id(self):
        body = render_body(payload(record_id="r1"))
        assert "Record: r1" in body
        assert "Case link" not in body
