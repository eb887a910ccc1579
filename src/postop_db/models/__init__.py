"""ORM models for postop_db."""

from postop_db.models.base import Base
from postop_db.models.feedback import PostopFeedback

__all__ = ["Base", "PostopFeedback"]
