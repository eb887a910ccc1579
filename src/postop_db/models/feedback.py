"""PostopFeedback ORM model — one insert-only row per triaged report.

The full normalized record (signals, patient context, triage result) lives
in a single JSONB column so the schema does not change when the normalizer
learns a new field.  ``patient_id``, ``score`` and ``level`` are copied
into dedicated columns for dashboard filtering.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Index, SmallInteger, String, Text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from postop_db.models.base import Base


class PostopFeedback(Base):
    """One row per post-operative symptom report."""

    __tablename__ = "postop_feedback"

    # --- Primary key ---
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # --- Identity ---
    # Clinic-issued patient identifier, if the caller supplied one
    patient_id: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)

    # --- Record ---
    # Shape: {"signals": {...}, "context": {...}, "result": {...}}
    payload: Mapped[dict] = mapped_column(JSONB, nullable=False)

    # --- Triage outcome ---
    score: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    # Store as the lowercase string value, not the Python name
    level: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # --- Timestamps ---
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # --- Table-level constraints ---
    __table_args__ = (
        CheckConstraint("score BETWEEN 0 AND 100", name="ck_score_range"),
        CheckConstraint(
            "level IN ('routine', 'routine_review', 'urgent_review', 'emergency')",
            name="ck_level_values",
        ),
        # Dashboard "latest alerts" listing
        Index("ix_level_created_at", "level", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<PostopFeedback(id={self.id!s}, patient={self.patient_id!r}, "
            f"score={self.score}, level={self.level!r})>"
        )
