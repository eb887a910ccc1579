"""Persistence tests — FeedbackRepository and the best-effort FeedbackRecorder.

No database is needed: the repository is exercised against an AsyncMock
session, and the recorder against a small fake session factory.
"""

import asyncio
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from postop_db.models.feedback import PostopFeedback
from postop_db.repository import FeedbackRepository
from postop_triage.models.enums import BleedingStatus, TriageLevel
from postop_triage.models.signals import NormalizedSignals, PatientContext
from postop_triage.models.triage import TriageResult

from postop_server.persistence import FeedbackRecorder, build_record

NOW = datetime(2026, 10, 19, 7, 15, tzinfo=timezone.utc)

SIGNALS = NormalizedSignals(
    patient_id="BN-11",
    pain_scale=6,
    bleeding_status=BleedingStatus.PRESENT,
    free_text="sưng",
)
CONTEXT = PatientContext(name="Phạm D", phone="0911", images=("w.jpg",))
RESULT = TriageResult(
    score=40,
    level=TriageLevel.ROUTINE_REVIEW,
    patient_message="...",
    contributions={"pain": 24.0, "bleeding": 8.0, "keyword:swelling": 8.0},
)


class FakeSession:
    """Just enough of AsyncSession for FeedbackRepository.insert + commit."""

    def __init__(self, *, fail_on_flush=False, commit_delay=0.0):
        self.added: list = []
        self.committed = False
        self.fail_on_flush = fail_on_flush
        self.commit_delay = commit_delay

    def add(self, row):
        self.added.append(row)

    async def flush(self):
        if self.fail_on_flush:
            raise ConnectionError("db down")
        for row in self.added:
            if row.id is None:
                row.id = uuid.uuid4()

    async def commit(self):
        if self.commit_delay:
            await asyncio.sleep(self.commit_delay)
        self.committed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def factory_for(session: FakeSession):
    return lambda: session


# =====================================================================
# Record shape
# =====================================================================


class TestBuildRecord:

    def test_sections(self):
        record = build_record(SIGNALS, CONTEXT, RESULT)
        assert set(record) == {"signals", "context", "result"}
        assert record["signals"]["bleeding_status"] == "present"
        assert record["context"]["images"] == ["w.jpg"]
        assert record["result"]["level"] == "routine_review"

    def test_patient_message_not_stored(self):
        record = build_record(SIGNALS, CONTEXT, RESULT)
        assert "patient_message" not in record["result"]


# =====================================================================
# Repository
# =====================================================================


class TestFeedbackRepository:

    @pytest.mark.asyncio
    async def test_insert_adds_and_flushes(self):
        db = AsyncMock()
        db.add = MagicMock()
        row = await FeedbackRepository().insert(
            db, patient_id="BN-11", payload={"a": 1}, score=40,
            level="routine_review", created_at=NOW,
        )
        assert isinstance(row, PostopFeedback)
        assert (row.patient_id, row.score, row.level, row.created_at) == (
            "BN-11", 40, "routine_review", NOW,
        )
        db.add.assert_called_once_with(row)
        db.flush.assert_awaited_once()
        db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_created_at_defaults_to_now(self):
        db = AsyncMock()
        db.add = MagicMock()
        row = await FeedbackRepository().insert(
            db, patient_id=None, payload={}, score=0, level="routine",
        )
        assert row.created_at.tzinfo is not None


# =====================================================================
# Recorder
# =====================================================================


class TestFeedbackRecorder:

    @pytest.mark.asyncio
    async def test_returns_row_id_and_commits(self):
        session = FakeSession()
        recorder = FeedbackRecorder(factory_for(session))
        record_id = await recorder.record(
            signals=SIGNALS, context=CONTEXT, result=RESULT, created_at=NOW,
        )
        assert session.committed
        row = session.added[0]
        assert record_id == str(row.id)
        uuid.UUID(record_id)
        assert row.payload == build_record(SIGNALS, CONTEXT, RESULT)
        assert row.level == "routine_review"

    @pytest.mark.asyncio
    async def test_failure_returns_none(self):
        recorder = FeedbackRecorder(factory_for(FakeSession(fail_on_flush=True)))
        record_id = await recorder.record(
            signals=SIGNALS, context=CONTEXT, result=RESULT, created_at=NOW,
        )
        assert record_id is None

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self):
        session = FakeSession(commit_delay=5)
        recorder = FeedbackRecorder(factory_for(session), timeout=0.05)
        record_id = await recorder.record(
            signals=SIGNALS, context=CONTEXT, result=RESULT, created_at=NOW,
        )
        assert record_id is None
        assert not session.committed
