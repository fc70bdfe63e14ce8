"""Emergency-alert escalation state machine.

A session starts when a trigger fires (danger-zone entry, periodic
check-in) and asks the user "are you safe?".  Silence is treated as
distress:

1. **Pending** -- the response countdown runs (30 ticks by default).
2. **Alarm active** -- the alert tone plays and the auto-escalation
   countdown runs (20 ticks by default).  The user can stop the alarm or
   call for help straight away.
3. **SOS placed** -- the emergency number is dialed, either manually or
   because the auto-escalation countdown ran out.

Answering "I'm safe" while pending, or stopping the alarm, ends the
session as **marked safe**.

Every transition happens on a single tick sequence delivered by an
injectable :class:`~src.services.escalation.scheduler.Scheduler`, so the
whole lifecycle can be fast-forwarded deterministically.  The phase change
is authoritative: a failing call or tone is logged and never holds a
transition back.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from src.models.alert import AlertOutcome, AlertSession, Coordinate, RegionRisk
from src.models.enums import AlertPhase

if TYPE_CHECKING:
    from config.settings import Settings
    from src.services.escalation.capabilities import AlertTone, CallPlacer, ToneFactory
    from src.services.escalation.scheduler import Scheduler, TimerHandle

logger = structlog.get_logger(__name__)

OutcomeCallback = Callable[[AlertOutcome], None]


@dataclass(frozen=True, slots=True)
class EscalationTimings:
    """Durations (in ticks) and the number dialed on SOS."""

    response_countdown: int = 30
    auto_escalation: int = 20
    safe_report_delay: int = 1
    alarm_tone_timeout: int = 20
    need_help_tone_timeout: int = 30
    emergency_number: str = "112"

    @classmethod
    def from_settings(cls, config: Settings) -> EscalationTimings:
        return cls(
            response_countdown=config.response_countdown_ticks,
            auto_escalation=config.auto_escalation_ticks,
            safe_report_delay=config.safe_report_delay_ticks,
            alarm_tone_timeout=config.alarm_tone_timeout_ticks,
            need_help_tone_timeout=config.need_help_tone_timeout_ticks,
            emergency_number=config.emergency_number,
        )


# ---------------------------------------------------------------------------
# SessionHandle
# ---------------------------------------------------------------------------


class SessionHandle:
    """Caller-facing handle of one alert session.

    All user signals are safe to call in any phase: a signal that does not
    apply to the current phase is logged and ignored.
    """

    __slots__ = (
        "_session",
        "_scheduler",
        "_call_placer",
        "_tone",
        "_timings",
        "_callbacks",
        "_timers",
        "_tone_live",
        "_log",
    )

    def __init__(
        self,
        session: AlertSession,
        *,
        scheduler: Scheduler,
        call_placer: CallPlacer,
        tone: AlertTone,
        timings: EscalationTimings,
        callbacks: list[OutcomeCallback],
    ) -> None:
        self._session = session
        self._scheduler = scheduler
        self._call_placer = call_placer
        self._tone = tone
        self._timings = timings
        self._callbacks = callbacks
        self._timers: dict[str, TimerHandle] = {}
        self._tone_live = False
        self._log = logger.bind(session_id=session.session_id)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def session(self) -> AlertSession:
        """Snapshot of the session state."""
        return self._session.model_copy(deep=True)

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def phase(self) -> AlertPhase:
        return self._session.phase

    @property
    def is_live(self) -> bool:
        """True until the outcome has been reported or the session closed."""
        return not self._session.closed

    @property
    def active_timers(self) -> tuple[str, ...]:
        return tuple(sorted(self._timers))

    # ------------------------------------------------------------------
    # User signals
    # ------------------------------------------------------------------

    def signal_safe(self) -> None:
        """User answered "I'm safe" to the check-in question."""
        if not self._accepts("safe", AlertPhase.PENDING):
            return

        self._cancel("response")
        self._session.phase = AlertPhase.MARKED_SAFE
        self._session.auto_escalation_remaining = self._timings.auto_escalation
        self._log.info("escalation.marked_safe", source="check_in")

        self._arm(
            "safe_report",
            self._scheduler.call_later(
                self._timings.safe_report_delay,
                lambda: self._finish(marked_safe=True),
            ),
        )

    def signal_need_help(self) -> None:
        """User answered "I need help": sound the alarm without waiting."""
        if not self._accepts("need_help", AlertPhase.PENDING):
            return

        self._cancel("response")
        self._enter_alarm(
            tone_timeout=self._timings.need_help_tone_timeout,
            reason="need_help",
        )

    def signal_stop_alarm(self) -> None:
        """User stopped the alarm and confirmed they are safe."""
        if not self._accepts("stop_alarm", AlertPhase.ALARM_ACTIVE):
            return

        self._session.phase = AlertPhase.MARKED_SAFE
        self._cancel("auto_escalation")
        self._cancel("tone_timeout")
        self._stop_tone()
        self._session.auto_escalation_remaining = self._timings.auto_escalation
        self._log.info("escalation.marked_safe", source="alarm_stopped")
        self._finish(marked_safe=True)

    def signal_trigger_sos(self) -> None:
        """User asked for the emergency call right now."""
        if not self._accepts("trigger_sos", AlertPhase.ALARM_ACTIVE):
            return
        self._place_sos(trigger="manual")

    def close(self) -> None:
        """Tear the session down.  Callable at any time, idempotent."""
        if self._session.closed:
            return
        self._log.info("escalation.session_closed", phase=self._session.phase.value)
        self._finish(marked_safe=self._session.phase == AlertPhase.MARKED_SAFE)

    # ------------------------------------------------------------------
    # Internal: lifecycle
    # ------------------------------------------------------------------

    def _begin(self) -> None:
        self._log.info(
            "escalation.session_started",
            response_ticks=self._session.response_remaining,
            has_location=self._session.location is not None,
        )
        self._arm("response", self._scheduler.call_every(1, self._tick_response))

    def _tick_response(self) -> None:
        if self._session.closed or self._session.phase != AlertPhase.PENDING:
            return
        self._session.response_remaining = max(0, self._session.response_remaining - 1)
        if self._session.response_remaining == 0:
            self._on_response_elapsed()

    def _on_response_elapsed(self) -> None:
        # Re-delivered zero events land here after the phase moved on.
        if self._session.closed or self._session.phase != AlertPhase.PENDING:
            return
        self._cancel("response")
        self._enter_alarm(
            tone_timeout=self._timings.alarm_tone_timeout,
            reason="no_response",
        )

    def _enter_alarm(self, tone_timeout: int, reason: str) -> None:
        self._session.phase = AlertPhase.ALARM_ACTIVE
        self._session.auto_escalation_remaining = self._timings.auto_escalation
        self._log.warning(
            "escalation.alarm_started",
            reason=reason,
            auto_escalation_ticks=self._timings.auto_escalation,
            tone_timeout_ticks=tone_timeout,
        )

        self._start_tone()
        self._arm("auto_escalation", self._scheduler.call_every(1, self._tick_auto_escalation))
        self._arm("tone_timeout", self._scheduler.call_later(tone_timeout, self._on_tone_timeout))

    def _tick_auto_escalation(self) -> None:
        if self._session.closed or self._session.phase != AlertPhase.ALARM_ACTIVE:
            return
        self._session.auto_escalation_remaining = max(
            0, self._session.auto_escalation_remaining - 1
        )
        if self._session.auto_escalation_remaining == 0:
            self._on_auto_escalation_elapsed()

    def _on_auto_escalation_elapsed(self) -> None:
        if self._session.closed or self._session.phase != AlertPhase.ALARM_ACTIVE:
            return
        self._log.warning("escalation.auto_escalation_elapsed")
        self._place_sos(trigger="auto")

    def _on_tone_timeout(self) -> None:
        self._timers.pop("tone_timeout", None)
        if self._tone_live:
            self._log.info("escalation.tone_timed_out", phase=self._session.phase.value)
        self._stop_tone()

    def _place_sos(self, trigger: str) -> None:
        self._session.phase = AlertPhase.SOS_PLACED
        self._cancel_all()
        self._stop_tone()

        number = self._timings.emergency_number
        try:
            self._call_placer.place_emergency_call(number)
        except Exception:
            self._log.error("escalation.call_failed", number=number, trigger=trigger, exc_info=True)
        else:
            self._log.warning("escalation.sos_placed", number=number, trigger=trigger)

        self._finish(marked_safe=False)

    def _finish(self, marked_safe: bool) -> None:
        if self._session.closed:
            return

        self._cancel_all()
        self._stop_tone()
        self._session.closed = True
        self._session.ended_at = datetime.now(UTC)

        outcome = AlertOutcome(
            session_id=self._session.session_id,
            marked_safe=marked_safe,
            phase=self._session.phase,
        )
        self._log.info(
            "escalation.session_finished",
            phase=outcome.phase.value,
            marked_safe=marked_safe,
        )
        for callback in self._callbacks:
            try:
                callback(outcome)
            except Exception:
                self._log.error("escalation.callback_failed", callback=repr(callback), exc_info=True)

    # ------------------------------------------------------------------
    # Internal: timers and tone
    # ------------------------------------------------------------------

    def _accepts(self, signal: str, expected: AlertPhase) -> bool:
        if not self._session.closed and self._session.phase == expected:
            return True
        self._log.info(
            "escalation.signal_ignored",
            signal=signal,
            phase=self._session.phase.value,
            closed=self._session.closed,
        )
        return False

    def _arm(self, name: str, handle: TimerHandle) -> None:
        self._cancel(name)
        self._timers[name] = handle

    def _cancel(self, name: str) -> None:
        handle = self._timers.pop(name, None)
        if handle is not None:
            handle.cancel()

    def _cancel_all(self) -> None:
        for name in list(self._timers):
            self._cancel(name)

    def _start_tone(self) -> None:
        self._tone_live = True
        self._session.alert_tone_active = True
        try:
            self._tone.start()
        except Exception:
            self._log.error("escalation.tone_start_failed", exc_info=True)

    def _stop_tone(self) -> None:
        # Called even when start() raised; the device may be half-open.
        if not self._tone_live:
            return
        self._tone_live = False
        self._session.alert_tone_active = False
        try:
            self._tone.stop()
        except Exception:
            self._log.error("escalation.tone_stop_failed", exc_info=True)


# ---------------------------------------------------------------------------
# EscalationController
# ---------------------------------------------------------------------------


class EscalationController:
    """Creates alert sessions and keeps at most one of them live.

    Parameters
    ----------
    call_placer:
        Dials the emergency number when a session escalates.
    tone_factory:
        Builds a fresh alert tone for every session.
    scheduler:
        Tick source; :class:`ManualScheduler` in tests,
        :class:`AsyncioScheduler` in a running service.
    timings:
        Durations and emergency number.  Defaults to the application
        settings.

    Example usage::

        controller = EscalationController(
            call_placer=LoggingCallPlacer(),
            tone_factory=LoggingAlertTone,
            scheduler=ManualScheduler(),
        )
        handle = controller.start(Coordinate(lat=28.61, lng=77.21))
        handle.signal_safe()
    """

    def __init__(
        self,
        call_placer: CallPlacer,
        tone_factory: ToneFactory,
        scheduler: Scheduler,
        timings: EscalationTimings | None = None,
    ) -> None:
        if timings is None:
            from config.settings import settings

            timings = EscalationTimings.from_settings(settings)

        self._call_placer = call_placer
        self._tone_factory = tone_factory
        self._scheduler = scheduler
        self._timings = timings
        self._active: SessionHandle | None = None

    @property
    def timings(self) -> EscalationTimings:
        return self._timings

    @property
    def active_session(self) -> SessionHandle | None:
        return self._active

    def start(
        self,
        location: Coordinate | None = None,
        *,
        context: RegionRisk | None = None,
        on_closed: OutcomeCallback | None = None,
    ) -> SessionHandle:
        """Open a new alert session in the pending phase.

        If a session is still live, it is returned unchanged and no new
        session is created.
        """
        if self._active is not None and self._active.is_live:
            logger.warning(
                "escalation.session_already_live",
                session_id=self._active.session_id,
                phase=self._active.phase.value,
            )
            return self._active

        session = AlertSession(
            response_remaining=self._timings.response_countdown,
            auto_escalation_remaining=self._timings.auto_escalation,
            location=location,
            context=context,
        )

        callbacks: list[OutcomeCallback] = []
        handle = SessionHandle(
            session,
            scheduler=self._scheduler,
            call_placer=self._call_placer,
            tone=self._tone_factory(),
            timings=self._timings,
            callbacks=callbacks,
        )
        callbacks.append(lambda _outcome: self._release(handle))
        if on_closed is not None:
            callbacks.append(on_closed)

        self._active = handle
        handle._begin()
        return handle

    def _release(self, handle: SessionHandle) -> None:
        if self._active is handle:
            self._active = None
