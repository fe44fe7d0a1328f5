from __future__ import annotations

from collections.abc import Sequence

import simpy

from tnsbeat.core.config import ScenarioStep
from tnsbeat.features.host.simulated import SimulatedPlayer
from tnsbeat.features.scheduler.types import HOST_EVENT_NAMES

# script-only actions on top of the host lifecycle events
SCRIPT_ACTIONS: set[str] = {"seek"}


def validate_steps(steps: Sequence[ScenarioStep]) -> None:
    allowed = set(HOST_EVENT_NAMES) | SCRIPT_ACTIONS
    for i, step in enumerate(steps):
        if step.event not in allowed:
            raise ValueError(
                f"scenario.steps[{i}].event={step.event!r} is not supported. "
                f"Allowed={sorted(allowed)}"
            )
        if step.event == "seek" and step.position is None:
            raise ValueError(f"scenario.steps[{i}] 'seek' requires a position")
        if step.at < 0:
            raise ValueError(f"scenario.steps[{i}].at must be >= 0")


class ScenarioService:
    """
    Replays a scripted playback timeline against a SimulatedPlayer.

    Steps fire at `at` seconds of SimPy time. A step's `position` seeks the
    player before its event is delivered.
    """

    def __init__(
        self,
        *,
        env: simpy.Environment,
        player: SimulatedPlayer,
        steps: Sequence[ScenarioStep],
    ) -> None:
        validate_steps(steps)
        self.env = env
        self.player = player
        self.steps = sorted(steps, key=lambda s: s.at)
        self.applied: list[ScenarioStep] = []

    def start(self) -> simpy.events.Process:
        return self.env.process(self._replay())

    def _replay(self):
        for step in self.steps:
            delay = step.at - float(self.env.now)
            if delay > 0:
                yield self.env.timeout(delay)
            self._apply(step)

    def _apply(self, step: ScenarioStep) -> None:
        if step.position is not None:
            self.player.seek(step.position)

        if step.event == "play":
            self.player.play()
        elif step.event == "pause":
            self.player.pause()
        elif step.event == "ended":
            self.player.end()
        elif step.event != "seek":
            self.player.emit(step.event)

        self.applied.append(step)
