"""Lakshman Rekha service layer -- escalation, check-ins, contacts, risk context."""

from __future__ import annotations

from src.services.emergency_contacts import (
    EMERGENCY_CONTACTS,
    EmergencyContact,
    EmergencyContactsDirectory,
)
from src.services.escalation import (
    AsyncioScheduler,
    CallError,
    EscalationController,
    EscalationTimings,
    LoggingAlertTone,
    LoggingCallPlacer,
    ManualScheduler,
    SessionHandle,
)
from src.services.region_risk import RegionRiskService
from src.services.safety_check import PeriodicSafetyCheck

__all__ = [
    "EMERGENCY_CONTACTS",
    "AsyncioScheduler",
    "CallError",
    "EmergencyContact",
    "EmergencyContactsDirectory",
    "EscalationController",
    "EscalationTimings",
    "LoggingAlertTone",
    "LoggingCallPlacer",
    "ManualScheduler",
    "PeriodicSafetyCheck",
    "RegionRiskService",
    "SessionHandle",
]
