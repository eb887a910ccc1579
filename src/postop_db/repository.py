"""Async insert-only repository for PostopFeedback.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries.  The repository does no business-logic validation;
score range and level values are enforced by DB constraints.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from postop_db.models.feedback import PostopFeedback


class FeedbackRepository:
    """Async write operations on the ``postop_feedback`` table."""

    async def insert(
        self,
        db: AsyncSession,
        *,
        patient_id: str | None,
        payload: dict[str, Any],
        score: int,
        level: str,
        created_at: datetime | None = None,
    ) -> PostopFeedback:
        """Insert a new feedback row and return it.

        The caller must ``await db.commit()`` to persist.
        """
        row = PostopFeedback(
            patient_id=patient_id,
            payload=payload,
            score=score,
            level=level,
            created_at=created_at or datetime.now(timezone.utc),
        )
        db.add(row)
        await db.flush()  # Populate the primary key
        return row
