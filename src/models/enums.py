from __future__ import annotations

from enum import StrEnum


class AlertPhase(StrEnum):
    __slots__ = ()

    PENDING = "pending"
    ALARM_ACTIVE = "alarm_active"
    MARKED_SAFE = "marked_safe"
    SOS_PLACED = "sos_placed"

    @property
    def is_terminal(self) -> bool:
        return self in (AlertPhase.MARKED_SAFE, AlertPhase.SOS_PLACED)


class CrimeRiskLevel(StrEnum):
    __slots__ = ()

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DisasterRiskLevel(StrEnum):
    __slots__ = ()

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    SEVERE = "severe"


class SchemeCategory(StrEnum):
    __slots__ = ()

    EDUCATION = "Education"
    HEALTH = "Health"
    SAFETY = "Safety"
    EMPOWERMENT = "Empowerment"
    ENTREPRENEURSHIP = "Entrepreneurship"
    FINANCIAL = "Financial"
    GENERAL = "General"
