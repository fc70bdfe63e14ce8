"""Side-effect capabilities invoked by the escalation controller.

The controller never depends on a concrete device: it is handed a
:class:`CallPlacer` and a :data:`ToneFactory`.  Each alert session asks the
factory for its own :class:`AlertTone`, so no two sessions share a
playback handle.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class CallError(Exception):
    """The emergency call could not be placed."""

    def __init__(self, number: str, reason: str = "") -> None:
        self.number = number
        self.reason = reason
        super().__init__(f"Could not place call to {number}: {reason or 'unknown error'}")


class CallPlacer(Protocol):
    def place_emergency_call(self, number: str) -> None:
        """Dial *number*.  Raises :class:`CallError` on failure."""
        ...


class AlertTone(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...


ToneFactory = Callable[[], AlertTone]


class LoggingCallPlacer:
    """Records dialed numbers and emits a log event per call.

    Stands in for a telephony bridge (``tel:`` link, SIP trunk, SMS
    gateway) when none is configured.
    """

    __slots__ = ("placed_calls",)

    def __init__(self) -> None:
        self.placed_calls: list[str] = []

    def place_emergency_call(self, number: str) -> None:
        if not number or not number.strip():
            raise CallError(number, "empty number")
        self.placed_calls.append(number)
        logger.warning("call.placed", number=number)


class LoggingAlertTone:
    """Looping alert tone that only reports its state to the log."""

    __slots__ = ("name", "playing")

    def __init__(self, name: str = "police_siren") -> None:
        self.name = name
        self.playing = False

    def start(self) -> None:
        if self.playing:
            return
        self.playing = True
        logger.info("tone.started", tone=self.name)

    def stop(self) -> None:
        if not self.playing:
            return
        self.playing = False
        logger.info("tone.stopped", tone=self.name)
