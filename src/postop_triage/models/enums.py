"""Enumerations for triage signals, levels, and alert channels."""

import enum


class BleedingStatus(str, enum.Enum):
    """Reported wound bleeding, from least to most concerning."""

    NONE = "none"
    PRESENT = "present"
    ACTIVE = "active"


class TriageLevel(str, enum.Enum):
    """Ordered triage tiers.

    Ordering (least to most severe):
        routine -> routine_review -> urgent_review -> emergency

    ``urgent_review`` and ``emergency`` notify clinical staff.
    """

    ROUTINE = "routine"
    ROUTINE_REVIEW = "routine_review"
    URGENT_REVIEW = "urgent_review"
    EMERGENCY = "emergency"

    @property
    def rank(self) -> int:
        """Position in :data:`LEVEL_ORDER` (0 = least severe)."""
        return LEVEL_ORDER.index(self)


# Least to most severe.  Used to compare levels.
LEVEL_ORDER: list[TriageLevel] = [
    TriageLevel.ROUTINE,
    TriageLevel.ROUTINE_REVIEW,
    TriageLevel.URGENT_REVIEW,
    TriageLevel.EMERGENCY,
]

# Levels at or above the second-highest tier page the care team.
STAFF_ALERT_LEVELS: frozenset[TriageLevel] = frozenset(
    {TriageLevel.URGENT_REVIEW, TriageLevel.EMERGENCY}
)


class AlertChannelName(str, enum.Enum):
    """Outbound channels the dispatcher can deliver to."""

    MESSAGING = "messaging"
    EMAIL = "email"
