from __future__ import annotations

import logging
from collections import Counter

from tnsbeat.core.clock import Clock
from tnsbeat.core.logging import get_logger
from tnsbeat.features.dispatch.service import BeaconSink
from tnsbeat.features.encoder.service import encode_beacon_url
from tnsbeat.features.host.types import PlayerHost
from tnsbeat.features.plugin.options import SessionOptions
from tnsbeat.features.scheduler import machine
from tnsbeat.features.scheduler.types import (
    BeaconSuppressed,
    CancelTimer,
    Effect,
    HostAction,
    HostCommand,
    IssueBeacon,
    MachineConfig,
    PausePolicy,
    PlaybackEvent,
    PlaybackSample,
    SchedulerPhase,
    SchedulerState,
    StartRefused,
    StartTimer,
    parse_event_name,
)
from tnsbeat.features.skew.service import compute_skew
from tnsbeat.features.timers.service import CancelToken, TimerScheduler


class BeaconSession:
    """
    Runtime side of one playback session.

    Feeds host events and timer ticks through the pure state machine and
    carries out the resulting effects: arming/cancelling the single recurring
    timer, commanding the host, and dispatching encoded beacons.

    Clock skew is measured once, here, against the clock at construction.
    """

    def __init__(
        self,
        *,
        options: SessionOptions,
        host: PlayerHost,
        timers: TimerScheduler,
        clock: Clock,
        sink: BeaconSink,
        pause_policy: PausePolicy = PausePolicy.STOP,
        dedupe: bool = False,
        secure: bool = True,
        session_id: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.options = options
        self.host = host
        self.timers = timers
        self.clock = clock
        self.sink = sink
        self.secure = secure
        self.session_id = session_id
        self._logger = logger or get_logger(__name__)

        self.skew_s = compute_skew(options.server_timestamp, clock.now())
        self.cfg = MachineConfig(
            interval_ms=options.interval_ms,
            live=options.live,
            skew_s=self.skew_s,
            pause_policy=pause_policy,
            dedupe=dedupe,
            ads_managed=bool(host.has_preroll_subsystem()),
        )
        self.state = SchedulerState()
        self.beacons_sent = 0

        self._token: CancelToken | None = None
        # host events we expect back from our own pause/resume commands
        self._echoes: Counter[PlaybackEvent] = Counter()

    # ----------------------------
    # Inputs
    # ----------------------------

    def handle(self, event: PlaybackEvent) -> None:
        # echoes may arrive during the command or on a later host turn
        if event is not PlaybackEvent.ENDED and self._echoes[event] > 0:
            self._echoes[event] -= 1
            self._log(logging.DEBUG, "host_echo_ignored", event_type=event.value)
            return

        self.state, effects = machine.transition(self.state, event, self._sample(), self.cfg)
        self._apply(effects)

    def handle_name(self, event_name: str) -> None:
        self.handle(parse_event_name(event_name))

    def request_timer_start(self) -> None:
        """Start beacons now if the pre-roll guard allows it."""
        if self.state.phase is SchedulerPhase.ENDED:
            return
        self.state, effects = machine.request_timer_start(self.state, self.cfg)
        self._apply(effects)

    def _on_tick(self) -> None:
        self.state, effects = machine.tick(self.state, self._sample(), self.cfg)
        self._apply(effects)

    # ----------------------------
    # Effects
    # ----------------------------

    def _apply(self, effects: list[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, StartTimer):
                self._start_timer(effect.interval_ms)
            elif isinstance(effect, CancelTimer):
                self._cancel_timer()
            elif isinstance(effect, IssueBeacon):
                self._issue(effect)
            elif isinstance(effect, HostCommand):
                self._command_host(effect)
            elif isinstance(effect, StartRefused):
                self._log(logging.INFO, "timer_start_refused", reason=effect.reason)
            elif isinstance(effect, BeaconSuppressed):
                self._log(logging.DEBUG, "beacon_suppressed", fts=effect.position)
            else:
                raise TypeError(f"Unknown effect: {effect!r}")

    def _start_timer(self, interval_ms: int) -> None:
        self._cancel_timer()
        self._token = self.timers.schedule(interval_ms, self._on_tick)
        self._log(logging.INFO, "timer_started", reason=f"interval_ms={interval_ms}")
        # tick 0: at least one beacon per active segment
        self._on_tick()

    def _cancel_timer(self) -> None:
        if self._token is None:
            return
        self._token.cancel()
        self._token = None
        self._log(logging.INFO, "timer_stopped")

    def _command_host(self, cmd: HostCommand) -> None:
        # a host only reports a state change, so expect an echo only when one happens;
        # the count is raised before the call since a host may emit synchronously
        if cmd.action is HostAction.PAUSE:
            if not self.host.paused():
                self._echoes[PlaybackEvent.PAUSE] += 1
            self.host.pause()
        elif cmd.action is HostAction.SEEK:
            self.host.seek(cmd.position_s or 0.0)
        elif cmd.action is HostAction.RESUME:
            if self.host.paused():
                self._echoes[PlaybackEvent.PLAY] += 1
            self.host.play()

    def _issue(self, beacon: IssueBeacon) -> None:
        o = self.options
        params = o.beacon_params(fts=beacon.fts, vts=beacon.vts)
        url = encode_beacon_url(params, account=o.account, section=o.section, secure=self.secure)
        self.sink.dispatch(url)
        self.beacons_sent += 1
        self._log(logging.DEBUG, "beacon_issued", fts=beacon.fts, vts=beacon.vts, url=url)

    # ----------------------------
    # Helpers
    # ----------------------------

    @property
    def timer_active(self) -> bool:
        return self._token is not None and not self._token.cancelled

    def _sample(self) -> PlaybackSample:
        return PlaybackSample(
            position_s=float(self.host.current_time()),
            now_s=float(self.clock.now()),
            paused=bool(self.host.paused()),
        )

    def _log(self, level: int, msg: str, **fields) -> None:
        extra = {"feature": "scheduler", "session_id": self.session_id, **fields}
        self._logger.log(level, msg, extra=extra)
