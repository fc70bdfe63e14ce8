"""Emergency-alert escalation: state machine, tick schedulers, capabilities."""

from src.services.escalation.capabilities import (
    AlertTone,
    CallError,
    CallPlacer,
    LoggingAlertTone,
    LoggingCallPlacer,
    ToneFactory,
)
from src.services.escalation.controller import (
    EscalationController,
    EscalationTimings,
    SessionHandle,
)
from src.services.escalation.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    Scheduler,
)

__all__ = [
    "AlertTone",
    "AsyncioScheduler",
    "CallError",
    "CallPlacer",
    "EscalationController",
    "EscalationTimings",
    "LoggingAlertTone",
    "LoggingCallPlacer",
    "ManualScheduler",
    "Scheduler",
    "SessionHandle",
    "ToneFactory",
]
