"""Normalized crime and disaster records parsed from government datasets."""

from __future__ import annotations

from pydantic import BaseModel

from src.models.enums import CrimeRiskLevel, DisasterRiskLevel


class CrimeRecord(BaseModel):
    state: str
    district: str | None = None
    year: int
    rape: int = 0
    kidnapping: int = 0
    dowry_death: int = 0
    assault_on_women: int = 0
    assault_on_modesty: int = 0
    domestic_violence: int = 0
    trafficking: int = 0
    total_crimes: int
    risk_level: CrimeRiskLevel
    highest_crime_type: str
    highest_crime_count: int

    @property
    def region_key(self) -> str:
        """``STATE`` or ``STATE:DISTRICT``."""
        return f"{self.state}:{self.district}" if self.district else self.state


class DisasterRecord(BaseModel):
    location: str
    state: str | None = None
    disaster_type: str
    disaster_subtype: str
    year: int
    month: int | None = None
    deaths: float = 0.0
    affected: float = 0.0
    latitude: float | None = None
    longitude: float | None = None
    risk_level: DisasterRiskLevel
