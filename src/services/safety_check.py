"""Periodic "are you safe?" check-in.

Every poll (10 s by default) the check looks at how long it has been since
the user was last asked.  Once the interval (60 s by default) has passed,
it opens an alert session on the escalation controller.  Answering "safe"
restarts the interval from that moment.

The background loop follows the same start/stop shape as the other
asyncio background tasks in this package; :meth:`poll` can also be driven
directly with an injected clock.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from src.models.alert import AlertOutcome, Coordinate
    from src.services.escalation.controller import EscalationController, SessionHandle
    from src.services.region_risk import RegionRiskService

logger = structlog.get_logger(__name__)


class PeriodicSafetyCheck:
    """Opens an alert session whenever the check-in interval elapses.

    Parameters
    ----------
    controller:
        The escalation controller that owns the sessions.
    interval_seconds:
        Minimum time between two check-ins.
    poll_seconds:
        How often the background loop evaluates the interval.
    clock:
        Monotonic time source, in seconds.
    location:
        Last known position, if any.  Check-ins opened without one carry
        no region risk context.
    region_risk:
        Optional annotator for the session's display context.
    """

    def __init__(
        self,
        controller: EscalationController,
        *,
        interval_seconds: float = 60.0,
        poll_seconds: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
        location: Coordinate | None = None,
        region_risk: RegionRiskService | None = None,
    ) -> None:
        self._controller = controller
        self._interval = interval_seconds
        self._poll_seconds = poll_seconds
        self._clock = clock
        self._location = location
        self._region_risk = region_risk
        self._last_check = clock()
        self._enabled = True
        self._task: asyncio.Task[None] | None = None
        self._outcomes: list[AlertOutcome] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def last_check(self) -> float:
        return self._last_check

    @property
    def outcomes(self) -> list[AlertOutcome]:
        """Outcomes of the sessions this check has opened, oldest first."""
        return list(self._outcomes)

    def enable(self) -> None:
        if not self._enabled:
            self._enabled = True
            self._last_check = self._clock()
            logger.info("safety_check.enabled")

    def disable(self) -> None:
        if self._enabled:
            self._enabled = False
            logger.info("safety_check.disabled")

    def poll(self) -> SessionHandle | None:
        """Open a check-in session if one is due.  Returns the new handle."""
        if not self._enabled:
            return None

        now = self._clock()
        if now - self._last_check < self._interval:
            return None
        self._last_check = now

        active = self._controller.active_session
        if active is not None and active.is_live:
            logger.info("safety_check.skipped_session_live", session_id=active.session_id)
            return None

        context = self._region_risk.describe(self._location) if self._region_risk else None
        handle = self._controller.start(self._location, context=context, on_closed=self._on_closed)
        logger.info("safety_check.triggered", session_id=handle.session_id)
        return handle

    def _on_closed(self, outcome: AlertOutcome) -> None:
        self._outcomes.append(outcome)
        if outcome.marked_safe:
            self._last_check = self._clock()

    # ------------------------------------------------------------------
    # Background loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Poll forever; cancel the task (or call :meth:`stop`) to end it."""
        logger.info("safety_check.background_started", poll_seconds=self._poll_seconds)
        try:
            while True:
                await asyncio.sleep(self._poll_seconds)
                self.poll()
        except asyncio.CancelledError:
            logger.info("safety_check.background_cancelled")
            raise
        finally:
            logger.info("safety_check.background_stopped")

    def start(self) -> asyncio.Task[None]:
        """Run :meth:`run` as a background task on the running loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await asyncio.wait_for(self._task, timeout=10.0)
        except (asyncio.CancelledError, asyncio.TimeoutError):
            pass
        self._task = None
        logger.info("safety_check.stopped")
