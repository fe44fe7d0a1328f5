from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PlaybackEvent(Enum):
    PLAY = "play"
    PAUSE = "pause"
    ENDED = "ended"
    PREROLL_EXISTS = "prerollExists"
    ALL_PREROLLS_ENDED = "allPrerollsEnded"


# host event names -> core events; "playing" behaves like "play"
HOST_EVENT_NAMES: dict[str, PlaybackEvent] = {
    "play": PlaybackEvent.PLAY,
    "playing": PlaybackEvent.PLAY,
    "pause": PlaybackEvent.PAUSE,
    "ended": PlaybackEvent.ENDED,
    "prerollExists": PlaybackEvent.PREROLL_EXISTS,
    "allPrerollsEnded": PlaybackEvent.ALL_PREROLLS_ENDED,
}


def parse_event_name(name: str) -> PlaybackEvent:
    try:
        return HOST_EVENT_NAMES[name]
    except KeyError:
        raise ValueError(
            f"Unsupported playback event={name!r}. Allowed={sorted(HOST_EVENT_NAMES)}"
        ) from None


class SchedulerPhase(Enum):
    IDLE = "idle"
    WAITING_FOR_PREROLL_GATE = "waiting_for_preroll_gate"
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


class PrerollGate(Enum):
    NOT_SIGNALED = "not_signaled"
    PENDING = "pending"
    COMPLETE = "complete"


class PausePolicy(Enum):
    STOP = "stop"
    FREEZE = "freeze"


@dataclass(frozen=True, slots=True)
class MachineConfig:
    """Per-session constants the transition function needs."""

    interval_ms: int
    live: bool
    skew_s: int
    pause_policy: PausePolicy = PausePolicy.STOP
    dedupe: bool = False
    ads_managed: bool = False  # host runs its own pre-roll subsystem


@dataclass(frozen=True, slots=True)
class SchedulerState:
    phase: SchedulerPhase = SchedulerPhase.IDLE
    gate: PrerollGate = PrerollGate.NOT_SIGNALED
    preroll_seen: bool = False
    timer_running: bool = False
    last_reported_position: int | None = None
    paused_snapshot: int | None = None

    @property
    def gate_open(self) -> bool:
        return self.gate is not PrerollGate.PENDING


@dataclass(frozen=True, slots=True)
class PlaybackSample:
    """What the host reported at the instant an event or tick is handled."""

    position_s: float
    now_s: float
    paused: bool = False


# ----------------------------
# Effects (commands for the session driver)
# ----------------------------


class HostAction(Enum):
    PAUSE = "pause"
    SEEK = "seek"
    RESUME = "resume"


@dataclass(frozen=True, slots=True)
class StartTimer:
    interval_ms: int


@dataclass(frozen=True, slots=True)
class CancelTimer:
    pass


@dataclass(frozen=True, slots=True)
class IssueBeacon:
    fts: int
    vts: int


@dataclass(frozen=True, slots=True)
class HostCommand:
    action: HostAction
    position_s: float | None = None


@dataclass(frozen=True, slots=True)
class StartRefused:
    reason: str


@dataclass(frozen=True, slots=True)
class BeaconSuppressed:
    position: int


Effect = StartTimer | CancelTimer | IssueBeacon | HostCommand | StartRefused | BeaconSuppressed
