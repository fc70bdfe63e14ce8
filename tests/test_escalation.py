"""Tests for the emergency-alert escalation state machine.

Every test drives the controller with a ManualScheduler, so ticks are
advanced explicitly and nothing waits on wall-clock time.
"""

from __future__ import annotations

import pytest

from src.models.alert import AlertOutcome, Coordinate
from src.models.enums import AlertPhase
from src.services.escalation import (
    CallError,
    EscalationController,
    EscalationTimings,
    ManualScheduler,
)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class RecordingCallPlacer:
    def __init__(self, fail: bool = False) -> None:
        self.calls: list[str] = []
        self.fail = fail

    def place_emergency_call(self, number: str) -> None:
        self.calls.append(number)
        if self.fail:
            raise CallError(number, "no signal")


class RecordingTone:
    def __init__(self, fail_start: bool = False) -> None:
        self.events: list[str] = []
        self.fail_start = fail_start

    def start(self) -> None:
        self.events.append("start")
        if self.fail_start:
            raise RuntimeError("audio device busy")

    def stop(self) -> None:
        self.events.append("stop")


class Harness:
    """Controller wired to fakes, plus the outcomes it reported."""

    def __init__(self, *, fail_call: bool = False, fail_tone: bool = False) -> None:
        self.scheduler = ManualScheduler()
        self.calls = RecordingCallPlacer(fail=fail_call)
        self.tones: list[RecordingTone] = []
        self.outcomes: list[AlertOutcome] = []
        self._fail_tone = fail_tone
        self.controller = EscalationController(
            call_placer=self.calls,
            tone_factory=self._make_tone,
            scheduler=self.scheduler,
            timings=EscalationTimings(),
        )

    def _make_tone(self) -> RecordingTone:
        tone = RecordingTone(fail_start=self._fail_tone)
        self.tones.append(tone)
        return tone

    def start(self, location: Coordinate | None = None):
        return self.controller.start(location, on_closed=self.outcomes.append)

    @property
    def tone(self) -> RecordingTone:
        return self.tones[-1]


@pytest.fixture
def harness() -> Harness:
    return Harness()


# ---------------------------------------------------------------------------
# Session creation
# ---------------------------------------------------------------------------


class TestSessionStart:
    def test_new_session_is_pending_with_default_deadlines(self, harness: Harness) -> None:
        handle = harness.start()
        session = handle.session
        assert session.phase == AlertPhase.PENDING
        assert session.response_remaining == 30
        assert session.auto_escalation_remaining == 20
        assert session.alert_tone_active is False
        assert session.closed is False

    def test_location_is_attached_and_informational(self, harness: Harness) -> None:
        location = Coordinate(lat=28.6139, lng=77.2090)
        handle = harness.start(location)
        assert handle.session.location == location

    def test_session_snapshot_is_a_copy(self, harness: Harness) -> None:
        handle = harness.start()
        snapshot = handle.session
        snapshot.response_remaining = 0
        assert handle.session.response_remaining == 30, "mutating a snapshot must not affect the session"

    def test_start_while_live_returns_same_handle(self, harness: Harness) -> None:
        first = harness.start()
        second = harness.start()
        assert second is first
        assert len(harness.tones) == 1, "no second session should be built"

    def test_start_after_terminal_creates_new_session(self, harness: Harness) -> None:
        first = harness.start()
        first.signal_need_help()
        first.signal_trigger_sos()
        second = harness.start()
        assert second is not first
        assert second.phase == AlertPhase.PENDING
        assert harness.controller.active_session is second

    def test_timings_default_to_settings(self) -> None:
        controller = EscalationController(
            call_placer=RecordingCallPlacer(),
            tone_factory=RecordingTone,
            scheduler=ManualScheduler(),
        )
        assert controller.timings.response_countdown == 30
        assert controller.timings.auto_escalation == 20
        assert controller.timings.emergency_number == "112"


# ---------------------------------------------------------------------------
# Response countdown
# ---------------------------------------------------------------------------


class TestResponseCountdown:
    def test_countdown_decreases_one_per_tick(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(7)
        assert handle.session.response_remaining == 23

    def test_still_pending_one_tick_before_deadline(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(29)
        assert handle.phase == AlertPhase.PENDING
        assert handle.session.response_remaining == 1
        assert harness.tone.events == []

    def test_deadline_raises_alarm(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(30)
        session = handle.session
        assert session.phase == AlertPhase.ALARM_ACTIVE
        assert session.response_remaining == 0
        assert session.alert_tone_active is True
        assert session.auto_escalation_remaining == 20
        assert harness.tone.events == ["start"]

    def test_redelivered_zero_event_is_a_noop(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(30)
        handle._on_response_elapsed()
        handle._on_response_elapsed()
        assert handle.phase == AlertPhase.ALARM_ACTIVE
        assert harness.tone.events == ["start"], "tone must not be restarted"
        assert handle.session.auto_escalation_remaining == 20

    def test_stale_response_tick_after_alarm_does_not_change_state(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(31)
        remaining = handle.session.auto_escalation_remaining
        handle._tick_response()
        assert handle.session.response_remaining == 0, "countdown clamps at zero"
        assert handle.session.auto_escalation_remaining == remaining
        assert handle.phase == AlertPhase.ALARM_ACTIVE


# ---------------------------------------------------------------------------
# Full escalation without any user response
# ---------------------------------------------------------------------------


class TestAutoEscalation:
    def test_silence_escalates_to_sos(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(30)
        assert handle.phase == AlertPhase.ALARM_ACTIVE

        harness.scheduler.advance(19)
        assert handle.phase == AlertPhase.ALARM_ACTIVE
        assert handle.session.auto_escalation_remaining == 1
        assert harness.calls.calls == []

        harness.scheduler.advance(1)
        session = handle.session
        assert session.phase == AlertPhase.SOS_PLACED
        assert session.alert_tone_active is False
        assert harness.calls.calls == ["112"], "exactly one emergency call"
        assert harness.tone.events[-1] == "stop"

    def test_outcome_reported_once_without_marked_safe(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(50)
        assert harness.outcomes == [
            AlertOutcome(session_id=handle.session_id, marked_safe=False, phase=AlertPhase.SOS_PLACED)
        ]

    def test_no_timers_left_after_sos(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(50)
        assert handle.active_timers == ()
        assert harness.scheduler.pending_timers == 0
        harness.scheduler.advance(500)
        assert harness.calls.calls == ["112"]
        assert len(harness.outcomes) == 1

    def test_redelivered_escalation_zero_event_places_no_second_call(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(50)
        handle._on_auto_escalation_elapsed()
        handle._tick_auto_escalation()
        assert harness.calls.calls == ["112"]

    def test_custom_emergency_number(self) -> None:
        scheduler = ManualScheduler()
        calls = RecordingCallPlacer()
        controller = EscalationController(
            call_placer=calls,
            tone_factory=RecordingTone,
            scheduler=scheduler,
            timings=EscalationTimings(response_countdown=2, auto_escalation=3, emergency_number="100"),
        )
        controller.start()
        scheduler.advance(5)
        assert calls.calls == ["100"]

    def test_alarm_path_tone_timeout_matches_auto_escalation(self, harness: Harness) -> None:
        # The countdown path stops the tone after 20 ticks, the "I need
        # help" path after 30; both values are kept as configured.
        assert harness.controller.timings.alarm_tone_timeout == 20
        assert harness.controller.timings.need_help_tone_timeout == 30
        handle = harness.start()
        harness.scheduler.advance(50)
        assert handle.phase == AlertPhase.SOS_PLACED
        assert harness.tone.events.count("stop") == 1, "tone stop must not be repeated"


# ---------------------------------------------------------------------------
# "I'm safe" while pending
# ---------------------------------------------------------------------------


class TestSignalSafe:
    def test_safe_reports_after_one_tick(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(5)
        handle.signal_safe()
        assert handle.phase == AlertPhase.MARKED_SAFE
        assert harness.outcomes == [], "report is delayed by one tick"

        harness.scheduler.advance(1)
        assert handle.phase == AlertPhase.MARKED_SAFE
        assert harness.outcomes == [
            AlertOutcome(session_id=handle.session_id, marked_safe=True, phase=AlertPhase.MARKED_SAFE)
        ]

    def test_safe_never_places_call_or_starts_tone(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(5)
        handle.signal_safe()
        harness.scheduler.advance(200)
        assert harness.calls.calls == []
        assert harness.tone.events == []
        assert len(harness.outcomes) == 1
        assert handle.session.alert_tone_active is False

    def test_safe_stops_response_countdown(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(5)
        handle.signal_safe()
        harness.scheduler.advance(40)
        assert handle.session.response_remaining == 25
        assert handle.session.auto_escalation_remaining == 20

    def test_close_during_report_delay_reports_once(self, harness: Harness) -> None:
        handle = harness.start()
        handle.signal_safe()
        handle.close()
        harness.scheduler.advance(5)
        assert [o.marked_safe for o in harness.outcomes] == [True]

    def test_second_safe_signal_is_ignored(self, harness: Harness) -> None:
        handle = harness.start()
        handle.signal_safe()
        handle.signal_safe()
        harness.scheduler.advance(2)
        assert len(harness.outcomes) == 1

    def test_need_help_after_safe_is_ignored(self, harness: Harness) -> None:
        handle = harness.start()
        handle.signal_safe()
        handle.signal_need_help()
        assert handle.phase == AlertPhase.MARKED_SAFE
        assert harness.tone.events == []


# ---------------------------------------------------------------------------
# "I need help" while pending
# ---------------------------------------------------------------------------


class TestSignalNeedHelp:
    def test_alarm_starts_immediately(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(5)
        handle.signal_need_help()
        session = handle.session
        assert session.phase == AlertPhase.ALARM_ACTIVE
        assert session.alert_tone_active is True
        assert session.auto_escalation_remaining == 20
        assert harness.tone.events == ["start"]

    def test_response_countdown_stops(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(5)
        handle.signal_need_help()
        harness.scheduler.advance(10)
        assert handle.session.response_remaining == 25

    def test_auto_escalation_fires_twenty_ticks_later(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(5)
        handle.signal_need_help()

        harness.scheduler.advance(19)  # tick 24
        assert handle.phase == AlertPhase.ALARM_ACTIVE
        assert harness.calls.calls == []

        harness.scheduler.advance(1)  # tick 25
        assert handle.phase == AlertPhase.SOS_PLACED
        assert harness.calls.calls == ["112"]
        assert handle.session.alert_tone_active is False

    def test_tone_timeout_is_thirty_ticks_and_cancelled_by_sos(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(5)
        handle.signal_need_help()
        assert set(handle.active_timers) == {"auto_escalation", "tone_timeout"}

        harness.scheduler.advance(20)
        assert handle.active_timers == ()
        harness.scheduler.advance(20)  # past tick 35
        assert harness.tone.events == ["start", "stop"]

    def test_tone_times_out_after_thirty_ticks_when_escalation_is_slower(self) -> None:
        scheduler = ManualScheduler()
        tone = RecordingTone()
        controller = EscalationController(
            call_placer=RecordingCallPlacer(),
            tone_factory=lambda: tone,
            scheduler=scheduler,
            timings=EscalationTimings(auto_escalation=40),
        )
        handle = controller.start()
        scheduler.advance(5)
        handle.signal_need_help()

        scheduler.advance(29)
        assert handle.session.alert_tone_active is True
        scheduler.advance(1)  # tick 35
        assert tone.events == ["start", "stop"]
        assert handle.session.alert_tone_active is False
        assert handle.phase == AlertPhase.ALARM_ACTIVE, "tone timeout does not end the alarm"


# ---------------------------------------------------------------------------
# Alarm phase signals
# ---------------------------------------------------------------------------


class TestAlarmSignals:
    def test_stop_alarm_marks_safe_immediately(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(35)
        handle.signal_stop_alarm()
        session = handle.session
        assert session.phase == AlertPhase.MARKED_SAFE
        assert session.alert_tone_active is False
        assert session.auto_escalation_remaining == 20, "countdown is reset"
        assert harness.tone.events == ["start", "stop"]
        assert [o.marked_safe for o in harness.outcomes] == [True]

    def test_stop_alarm_prevents_escalation(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(35)
        handle.signal_stop_alarm()
        harness.scheduler.advance(100)
        assert harness.calls.calls == []
        assert handle.phase == AlertPhase.MARKED_SAFE

    def test_trigger_sos_places_call(self, harness: Harness) -> None:
        handle = harness.start()
        handle.signal_need_help()
        harness.scheduler.advance(3)
        handle.signal_trigger_sos()
        assert handle.phase == AlertPhase.SOS_PLACED
        assert harness.calls.calls == ["112"]
        assert harness.tone.events == ["start", "stop"]
        assert [o.marked_safe for o in harness.outcomes] == [False]

    def test_trigger_sos_then_timer_places_no_second_call(self, harness: Harness) -> None:
        handle = harness.start()
        handle.signal_need_help()
        handle.signal_trigger_sos()
        harness.scheduler.advance(100)
        assert harness.calls.calls == ["112"]

    def test_alarm_signals_ignored_while_pending(self, harness: Harness) -> None:
        handle = harness.start()
        handle.signal_stop_alarm()
        handle.signal_trigger_sos()
        assert handle.phase == AlertPhase.PENDING
        assert harness.calls.calls == []
        assert harness.outcomes == []

    def test_pending_signals_ignored_during_alarm(self, harness: Harness) -> None:
        handle = harness.start()
        handle.signal_need_help()
        handle.signal_safe()
        handle.signal_need_help()
        assert handle.phase == AlertPhase.ALARM_ACTIVE
        assert harness.tone.events == ["start"]


# ---------------------------------------------------------------------------
# Teardown
# ---------------------------------------------------------------------------


class TestClose:
    def test_close_while_pending_cancels_everything(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(10)
        handle.close()
        assert harness.scheduler.pending_timers == 0

        harness.scheduler.advance(100)
        assert handle.phase == AlertPhase.PENDING
        assert handle.session.response_remaining == 20
        assert harness.calls.calls == []
        assert harness.tone.events == []
        assert [o.marked_safe for o in harness.outcomes] == [False]

    def test_close_during_alarm_stops_tone(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(32)
        handle.close()
        harness.scheduler.advance(100)
        assert handle.phase == AlertPhase.ALARM_ACTIVE
        assert handle.session.alert_tone_active is False
        assert harness.tone.events == ["start", "stop"]
        assert harness.calls.calls == []

    def test_close_is_idempotent(self, harness: Harness) -> None:
        handle = harness.start()
        handle.close()
        handle.close()
        assert len(harness.outcomes) == 1

    def test_close_after_terminal_reports_nothing_more(self, harness: Harness) -> None:
        handle = harness.start()
        harness.scheduler.advance(50)
        handle.close()
        assert len(harness.outcomes) == 1

    def test_signals_after_close_are_ignored(self, harness: Harness) -> None:
        handle = harness.start()
        handle.close()
        handle.signal_need_help()
        handle.signal_safe()
        assert handle.phase == AlertPhase.PENDING
        assert harness.tone.events == []

    def test_close_releases_controller(self, harness: Harness) -> None:
        handle = harness.start()
        handle.close()
        assert harness.controller.active_session is None
        assert handle.is_live is False


# ---------------------------------------------------------------------------
# Capability failures
# ---------------------------------------------------------------------------


class TestCapabilityFailures:
    def test_failed_call_still_reaches_sos(self) -> None:
        harness = Harness(fail_call=True)
        handle = harness.start()
        harness.scheduler.advance(50)
        assert handle.phase == AlertPhase.SOS_PLACED
        assert harness.calls.calls == ["112"], "the call is attempted once, never retried"
        assert [o.marked_safe for o in harness.outcomes] == [False]

    def test_failed_tone_start_does_not_block_alarm(self) -> None:
        harness = Harness(fail_tone=True)
        handle = harness.start()
        handle.signal_need_help()
        assert handle.phase == AlertPhase.ALARM_ACTIVE
        assert handle.session.alert_tone_active is True

    def test_stop_is_called_even_if_start_failed(self) -> None:
        harness = Harness(fail_tone=True)
        handle = harness.start()
        handle.signal_need_help()
        handle.signal_stop_alarm()
        assert harness.tone.events == ["start", "stop"]

    def test_failing_outcome_observer_does_not_break_the_tick_loop(self, harness: Harness) -> None:
        def broken_observer(outcome: AlertOutcome) -> None:
            raise RuntimeError("observer crashed")

        handle = harness.controller.start(on_closed=broken_observer)
        harness.scheduler.advance(50)
        assert handle.phase == AlertPhase.SOS_PLACED
        assert not handle.is_live
        assert harness.scheduler.pending_timers == 0, "all session timers are cancelled"
        assert harness.controller.active_session is None
        assert harness.start() is not handle, "a new session can be opened afterwards"


# ---------------------------------------------------------------------------
# Invariants across every reachable path
# ---------------------------------------------------------------------------

_ALLOWED = {
    (AlertPhase.PENDING, AlertPhase.PENDING),
    (AlertPhase.PENDING, AlertPhase.ALARM_ACTIVE),
    (AlertPhase.PENDING, AlertPhase.MARKED_SAFE),
    (AlertPhase.ALARM_ACTIVE, AlertPhase.ALARM_ACTIVE),
    (AlertPhase.ALARM_ACTIVE, AlertPhase.MARKED_SAFE),
    (AlertPhase.ALARM_ACTIVE, AlertPhase.SOS_PLACED),
    (AlertPhase.MARKED_SAFE, AlertPhase.MARKED_SAFE),
    (AlertPhase.SOS_PLACED, AlertPhase.SOS_PLACED),
}

_SIGNALS = ("signal_safe", "signal_need_help", "signal_stop_alarm", "signal_trigger_sos", "close")


@pytest.mark.parametrize("signal_tick", [0, 12, 29, 30, 31, 45, 49])
@pytest.mark.parametrize("signal", _SIGNALS)
def test_transitions_and_tone_invariant(signal_tick: int, signal: str) -> None:
    harness = Harness()
    handle = harness.start()
    previous = handle.phase
    countdowns = (handle.session.response_remaining, handle.session.auto_escalation_remaining)

    for tick in range(80):
        if tick == signal_tick:
            getattr(handle, signal)()
        else:
            harness.scheduler.advance(1)

        session = handle.session
        assert (previous, session.phase) in _ALLOWED, f"illegal transition {previous} -> {session.phase}"
        if not session.closed:
            assert session.alert_tone_active == (session.phase == AlertPhase.ALARM_ACTIVE)
        if previous == session.phase == AlertPhase.PENDING:
            assert session.response_remaining <= countdowns[0], "response countdown never increases"
        if previous == session.phase == AlertPhase.ALARM_ACTIVE:
            assert session.auto_escalation_remaining <= countdowns[1], "escalation countdown never increases"
        assert session.response_remaining >= 0
        assert session.auto_escalation_remaining >= 0

        previous = session.phase
        countdowns = (session.response_remaining, session.auto_escalation_remaining)

    assert len(harness.outcomes) == 1, "on_closed fires exactly once"
    assert len(harness.calls.calls) <= 1
    assert handle.session.alert_tone_active is False
