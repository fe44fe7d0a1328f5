from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import simpy


class CancelToken(Protocol):
    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...


class TimerScheduler(Protocol):
    """Recurring-timer capability injected into the beacon session."""

    def schedule(self, interval_ms: int, callback: Callable[[], None]) -> CancelToken: ...


@dataclass(slots=True)
class SimpyTimerToken:
    interval_ms: int
    _cancelled: bool = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        # Synchronous: the process checks the flag before every callback, so
        # nothing runs after this returns. The process itself exits at its
        # next wake-up. Idempotent.
        self._cancelled = True


class SimpyTimerScheduler:
    """
    Recurring timers as SimPy processes. Env time is in seconds.

    Drive it with simpy.Environment for virtual time (tests, offline replay) or
    simpy.rt.RealtimeEnvironment to tick against the wall clock.
    """

    def __init__(self, env: simpy.Environment) -> None:
        self.env = env
        self._tokens: list[SimpyTimerToken] = []

    def schedule(self, interval_ms: int, callback: Callable[[], None]) -> SimpyTimerToken:
        if int(interval_ms) <= 0:
            raise ValueError(f"interval_ms must be > 0, got {interval_ms!r}")
        token = SimpyTimerToken(interval_ms=int(interval_ms))
        self.env.process(self._run(token, callback))
        self._tokens = [t for t in self._tokens if not t.cancelled]
        self._tokens.append(token)
        return token

    @property
    def active_count(self) -> int:
        return sum(1 for t in self._tokens if not t.cancelled)

    def _run(self, token: SimpyTimerToken, callback: Callable[[], None]):
        interval_s = token.interval_ms / 1000.0
        while not token.cancelled:
            yield self.env.timeout(interval_s)
            if token.cancelled:
                return
            callback()
