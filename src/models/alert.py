from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import AlertPhase, CrimeRiskLevel


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class RegionRisk(BaseModel):
    """Display context attached to a session; never read by the state machine."""

    model_config = ConfigDict(frozen=True)

    state: str
    distance_km: float
    risk_level: CrimeRiskLevel | None = None
    highest_crime_type: str | None = None
    total_crimes: int | None = None
    year: int | None = None


class AlertSession(BaseModel):
    """Mutable state of one emergency-alert session.

    Only :class:`~src.services.escalation.controller.SessionHandle` mutates
    this model; callers receive copies via ``SessionHandle.session``.
    """

    session_id: str = Field(default_factory=lambda: uuid4().hex)
    phase: AlertPhase = AlertPhase.PENDING
    response_remaining: int = Field(default=30, ge=0)
    auto_escalation_remaining: int = Field(default=20, ge=0)
    location: Coordinate | None = None
    context: RegionRisk | None = None
    alert_tone_active: bool = False
    closed: bool = False
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    ended_at: datetime | None = None


class AlertOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    marked_safe: bool
    phase: AlertPhase
