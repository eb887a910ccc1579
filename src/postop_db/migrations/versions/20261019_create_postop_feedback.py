"""Create the postop_feedback table.

One insert-only row per triaged report.  The full normalized record is
stored as JSONB; ``patient_id``, ``score`` and ``level`` are broken out for
dashboard filtering.

Revision ID: 20261019_feedback
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261019_feedback"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "postop_feedback",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("patient_id", sa.Text(), nullable=True),
        sa.Column("payload", JSONB(), nullable=False),
        sa.Column("score", sa.SmallInteger(), nullable=False),
        sa.Column("level", sa.String(20), nullable=False),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.CheckConstraint("score BETWEEN 0 AND 100", name="ck_score_range"),
        sa.CheckConstraint(
            "level IN ('routine', 'routine_review', 'urgent_review', 'emergency')",
            name="ck_level_values",
        ),
    )

    # --- Indexes ---
    op.create_index(
        "ix_postop_feedback_patient_id", "postop_feedback", ["patient_id"],
    )
    op.create_index("ix_postop_feedback_level", "postop_feedback", ["level"])
    op.create_index(
        "ix_level_created_at", "postop_feedback", ["level", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_level_created_at", table_name="postop_feedback")
    op.drop_index("ix_postop_feedback_level", table_name="postop_feedback")
    op.drop_index("ix_postop_feedback_patient_id", table_name="postop_feedback")
    op.drop_table("postop_feedback")
