from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import simpy


class Clock(Protocol):
    """Wall clock in epoch seconds (fractional)."""

    def now(self) -> float: ...


@dataclass
class SimClock:
    """
    Epoch clock driven by a SimPy environment: start_epoch + env.now.
    Works with both simpy.Environment and simpy.rt.RealtimeEnvironment.
    """

    env: simpy.Environment
    start_epoch: float

    def now(self) -> float:
        return float(self.start_epoch) + float(self.env.now)


@dataclass
class FixedClock:
    """Manually set clock; handy when a test needs a specific epoch."""

    value: float

    def now(self) -> float:
        return float(self.value)

    def set(self, value: float) -> None:
        self.value = float(value)
