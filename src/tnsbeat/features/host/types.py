from __future__ import annotations

from collections.abc import Callable
from typing import Protocol


class PlayerHost(Protocol):
    """
    Minimal surface the beacon session needs from a media player.

    Queries are sampled on every event and tick; commands are only issued for
    the post-preroll position reset. A pause()/play() that changes the paused
    state must be reported back as a "pause"/"play" event, now or on a later turn.
    """

    def current_time(self) -> float: ...
    def paused(self) -> bool: ...
    def has_preroll_subsystem(self) -> bool: ...

    def pause(self) -> None: ...
    def seek(self, position_s: float) -> None: ...
    def play(self) -> None: ...


class EventSourceHost(PlayerHost, Protocol):
    """A host that can also deliver lifecycle events by name."""

    def on(self, event_name: str, handler: Callable[[], None]) -> None: ...
