from src.models.alert import AlertOutcome, AlertSession, Coordinate, RegionRisk
from src.models.enums import (
    AlertPhase,
    CrimeRiskLevel,
    DisasterRiskLevel,
    SchemeCategory,
)
from src.models.hazard import CrimeRecord, DisasterRecord
from src.models.scheme import SchemeRecord

__all__ = [
    "AlertOutcome",
    "AlertPhase",
    "AlertSession",
    "Coordinate",
    "CrimeRecord",
    "CrimeRiskLevel",
    "DisasterRecord",
    "DisasterRiskLevel",
    "RegionRisk",
    "SchemeCategory",
    "SchemeRecord",
]
