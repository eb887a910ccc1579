"""SQLAlchemy declarative base shared by all ORM models.

Index names follow ``ix_<table>_<column>`` so that ``index=True`` columns
match the names created by the Alembic revisions.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for the postop_feedback schema."""

    metadata = MetaData(naming_convention={"ix": "ix_%(column_0_label)s"})
