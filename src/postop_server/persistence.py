"""Best-effort storage of triaged reports.

Storing a report is useful (dashboards, audit, case links in alerts) but
never required for answering the patient.  :meth:`FeedbackRecorder.record`
therefore bounds the insert with a timeout and converts every failure into
a logged ``None``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from postop_db.repository import FeedbackRepository
from postop_triage.models.signals import NormalizedSignals, PatientContext
from postop_triage.models.triage import TriageResult

logger = logging.getLogger(__name__)


def build_record(
    signals: NormalizedSignals,
    context: PatientContext,
    result: TriageResult,
) -> dict[str, Any]:
    """JSON-ready record stored in ``postop_feedback.payload``."""
    return {
        "signals": signals.model_dump(mode="json"),
        "context": context.model_dump(mode="json"),
        "result": result.model_dump(mode="json", exclude={"patient_message"}),
    }


class FeedbackRecorder:
    """Inserts one ``postop_feedback`` row per report, best-effort.

    Args:
        session_factory: async session factory bound to the feedback DB
        timeout: seconds to wait for the insert + commit
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        timeout: float = 5.0,
    ) -> None:
        self._factory = session_factory
        self._timeout = timeout
        self._repo = FeedbackRepository()

    async def record(
        self,
        *,
        signals: NormalizedSignals,
        context: PatientContext,
        result: TriageResult,
        created_at: datetime,
    ) -> str | None:
        """Store the report and return the new row id, or ``None`` on failure."""
        try:
            return await asyncio.wait_for(
                self._insert(signals, context, result, created_at),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error("DB save timed out after %.1fs", self._timeout)
        except Exception:
            logger.exception("DB save error")
        return None

    async def _insert(
        self,
        signals: NormalizedSignals,
        context: PatientContext,
        result: TriageResult,
        created_at: datetime,
    ) -> str:
        async with self._factory() as db:
            row = await self._repo.insert(
                db,
                patient_id=signals.patient_id,
                payload=build_record(signals, context, result),
                score=result.score,
                level=result.level.value,
                created_at=created_at,
            )
            await db.commit()
            return str(row.id)
