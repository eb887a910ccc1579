"""postop_db — optional PostgreSQL persistence for triaged reports.

This package provides the ORM model, async engine factory, and insert-only
repository used by the webhook server when ``DATABASE_URL`` is configured.
"""

from postop_db.engine import dispose_engine, get_engine, get_session_factory
from postop_db.models.feedback import PostopFeedback
from postop_db.repository import FeedbackRepository

__all__ = [
    "PostopFeedback",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "FeedbackRepository",
]
