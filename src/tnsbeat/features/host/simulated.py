from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable

import simpy


class SimulatedPlayer:
    """
    In-process player whose playhead advances with SimPy time while playing.

    Behaves like a browser player where it matters to the beacon session:
    - play()/pause() emit "play"/"pause" synchronously to subscribers
    - end() emits "ended"
    - ready(cb) defers cb until mark_ready() (or runs it at once if already ready)
    - commands are recorded in `commands` for assertions
    """

    def __init__(
        self,
        env: simpy.Environment,
        *,
        preroll_subsystem: bool = False,
        ready: bool = True,
    ) -> None:
        self.env = env
        self.preroll_subsystem = preroll_subsystem
        self.commands: list[tuple[str, float | None]] = []

        self._handlers: dict[str, list[Callable[[], None]]] = defaultdict(list)
        self._ready = ready
        self._ready_callbacks: list[Callable[[], None]] = []

        self._paused = True
        self._ended = False
        self._position_s = 0.0
        self._anchor_s = float(env.now)

    # ----------------------------
    # Queries
    # ----------------------------

    def current_time(self) -> float:
        if self._paused or self._ended:
            return self._position_s
        return self._position_s + (float(self.env.now) - self._anchor_s)

    def paused(self) -> bool:
        return self._paused

    def has_preroll_subsystem(self) -> bool:
        return self.preroll_subsystem

    # ----------------------------
    # Commands
    # ----------------------------

    def play(self) -> None:
        self.commands.append(("play", None))
        if not self._paused:
            return
        self._anchor_s = float(self.env.now)
        self._paused = False
        self._ended = False
        self.emit("play")

    def pause(self) -> None:
        self.commands.append(("pause", None))
        if self._paused:
            return
        self._position_s = self.current_time()
        self._paused = True
        self.emit("pause")

    def seek(self, position_s: float) -> None:
        self.commands.append(("seek", float(position_s)))
        self._position_s = float(position_s)
        self._anchor_s = float(self.env.now)

    def end(self) -> None:
        self._position_s = self.current_time()
        self._paused = True
        self._ended = True
        self.emit("ended")

    # ----------------------------
    # Events
    # ----------------------------

    def on(self, event_name: str, handler: Callable[[], None]) -> None:
        self._handlers[event_name].append(handler)

    def emit(self, event_name: str) -> None:
        for handler in list(self._handlers.get(event_name, ())):
            handler()

    def ready(self, callback: Callable[[], None]) -> None:
        if self._ready:
            callback()
            return
        self._ready_callbacks.append(callback)

    def mark_ready(self) -> None:
        self._ready = True
        callbacks, self._ready_callbacks = self._ready_callbacks, []
        for cb in callbacks:
            cb()
