from __future__ import annotations

import math
from dataclasses import replace

from tnsbeat.features.position.service import compute_fts, round_half_up
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
    PrerollGate,
    SchedulerPhase,
    SchedulerState,
    StartRefused,
    StartTimer,
)

Transition = tuple[SchedulerState, list[Effect]]


def _vts(sample: PlaybackSample) -> int:
    return math.floor(sample.now_s)


def _fts(sample: PlaybackSample, cfg: MachineConfig) -> int:
    return compute_fts(sample.position_s, _vts(sample), cfg.skew_s, cfg.live)


def request_timer_start(state: SchedulerState, cfg: MachineConfig) -> Transition:
    """
    Guarded timer start.

    Refused while an ad framework owns the timeline and the pre-roll phase has
    not completed; a no-op if a timer is already running.
    """
    if cfg.ads_managed and state.gate is not PrerollGate.COMPLETE:
        waiting = replace(state, phase=SchedulerPhase.WAITING_FOR_PREROLL_GATE)
        return waiting, [StartRefused(reason="preroll_phase_incomplete")]

    if state.timer_running:
        return state, []

    started = replace(
        state,
        phase=SchedulerPhase.ACTIVE,
        timer_running=True,
        paused_snapshot=None,
    )
    return started, [StartTimer(interval_ms=cfg.interval_ms)]


def _on_preroll_exists(state: SchedulerState) -> Transition:
    if state.gate is not PrerollGate.NOT_SIGNALED:
        return state, []

    phase = state.phase
    if not state.timer_running:
        phase = SchedulerPhase.WAITING_FOR_PREROLL_GATE
    return replace(state, gate=PrerollGate.PENDING, preroll_seen=True, phase=phase), []


def _on_all_prerolls_ended(state: SchedulerState, cfg: MachineConfig) -> Transition:
    if state.gate is PrerollGate.COMPLETE:
        return state, []

    state = replace(state, gate=PrerollGate.COMPLETE)
    effects: list[Effect] = []

    # ads shift frames: rewind VOD content to the start once the pre-roll is over
    if state.preroll_seen and not cfg.live:
        effects += [
            HostCommand(HostAction.PAUSE),
            HostCommand(HostAction.SEEK, position_s=0.0),
            HostCommand(HostAction.RESUME),
        ]

    state, start_effects = request_timer_start(state, cfg)
    return state, effects + start_effects


def _on_play(state: SchedulerState, cfg: MachineConfig) -> Transition:
    state = replace(state, paused_snapshot=None)

    if not state.gate_open:
        return replace(state, phase=SchedulerPhase.WAITING_FOR_PREROLL_GATE), []

    if state.timer_running:
        # freeze policy: timer survived the pause, just unfreeze
        return replace(state, phase=SchedulerPhase.ACTIVE), []

    return request_timer_start(state, cfg)


def _on_pause(state: SchedulerState, sample: PlaybackSample, cfg: MachineConfig) -> Transition:
    state = replace(state, phase=SchedulerPhase.PAUSED, paused_snapshot=_fts(sample, cfg))

    if cfg.pause_policy is PausePolicy.STOP and state.timer_running:
        return replace(state, timer_running=False), [CancelTimer()]
    return state, []


def transition(
    state: SchedulerState,
    event: PlaybackEvent,
    sample: PlaybackSample,
    cfg: MachineConfig,
) -> Transition:
    """
    Pure lifecycle transition: (state, event, sample) -> (state, effects).

    ENDED is terminal: every later event is ignored.
    """
    if state.phase is SchedulerPhase.ENDED:
        return state, []

    if event is PlaybackEvent.ENDED:
        # cancel even if state thinks no timer is running
        ended = replace(state, phase=SchedulerPhase.ENDED, timer_running=False)
        return ended, [CancelTimer()]

    if event is PlaybackEvent.PREROLL_EXISTS:
        return _on_preroll_exists(state)

    if event is PlaybackEvent.ALL_PREROLLS_ENDED:
        return _on_all_prerolls_ended(state, cfg)

    if event is PlaybackEvent.PLAY:
        return _on_play(state, cfg)

    if event is PlaybackEvent.PAUSE:
        return _on_pause(state, sample, cfg)

    raise ValueError(f"Unhandled playback event: {event!r}")


def tick(state: SchedulerState, sample: PlaybackSample, cfg: MachineConfig) -> Transition:
    """
    One timer elapse. Emits a beacon unless the session is not running a timer
    or dedupe finds the rounded position unchanged since the previous tick.

    Ticks while paused report the snapshot taken at pause time.
    """
    if state.phase is SchedulerPhase.ENDED or not state.timer_running:
        return state, []

    position = round_half_up(sample.position_s)
    if cfg.dedupe and state.last_reported_position == position:
        return state, [BeaconSuppressed(position=position)]

    frozen = state.paused_snapshot
    if frozen is None and sample.paused:
        # host is paused but the pause event was not seen; freeze from here
        frozen = _fts(sample, cfg)
        state = replace(state, paused_snapshot=frozen)

    fts = frozen if frozen is not None else _fts(sample, cfg)
    state = replace(state, last_reported_position=position)
    return state, [IssueBeacon(fts=fts, vts=_vts(sample))]
