"""Region risk annotation for alert sessions.

Resolves a coordinate to the nearest state centroid and attaches that
state's latest crime statistics.  The result is display context only;
the escalation state machine never reads it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from src.data.geo import nearest_state
from src.models.alert import Coordinate, RegionRisk

if TYPE_CHECKING:
    from src.data.repository import DatasetRepository

logger = structlog.get_logger(__name__)


class RegionRiskService:
    __slots__ = ("_repository",)

    def __init__(self, repository: DatasetRepository) -> None:
        self._repository = repository

    def describe(self, location: Coordinate | None) -> RegionRisk | None:
        """Risk context for *location*, or ``None`` without a location."""
        if location is None:
            return None

        state, distance_km = nearest_state(location)
        record = self._repository.crime_for_state(state)
        if record is None:
            logger.debug("region_risk.no_crime_data", state=state)
            return RegionRisk(state=state, distance_km=round(distance_km, 1))

        return RegionRisk(
            state=state,
            distance_km=round(distance_km, 1),
            risk_level=record.risk_level,
            highest_crime_type=record.highest_crime_type,
            total_crimes=record.total_crimes,
            year=record.year,
        )
