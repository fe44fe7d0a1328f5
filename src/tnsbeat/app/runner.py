from __future__ import annotations

from dataclasses import dataclass, field

import simpy
import simpy.rt

from tnsbeat.core.clock import SimClock
from tnsbeat.core.config import HeartbeatConfig, ScenarioConfig, load_config
from tnsbeat.core.logging import get_logger
from tnsbeat.features.dispatch.service import DryRunDispatcher, HttpBeaconDispatcher
from tnsbeat.features.host.simulated import SimulatedPlayer
from tnsbeat.features.plugin.service import heartbeat_tns_counter
from tnsbeat.features.scenario.service import ScenarioService
from tnsbeat.features.timers.service import SimpyTimerScheduler


@dataclass(frozen=True)
class RunResult:
    session_id: str | None
    skew_s: int
    beacons_sent: int
    urls: list[str] = field(default_factory=list)  # only filled in dry-run mode


def _make_env(scenario: ScenarioConfig) -> simpy.Environment:
    if scenario.realtime:
        return simpy.rt.RealtimeEnvironment(factor=scenario.realtime_factor, strict=False)
    return simpy.Environment()


def simulate(cfg: HeartbeatConfig) -> RunResult:
    if cfg.scenario is None:
        raise ValueError("Config has no 'scenario' section to simulate.")

    scenario = cfg.scenario
    logger = get_logger("tnsbeat", cfg.logging.level)

    env = _make_env(scenario)
    clock = SimClock(env=env, start_epoch=scenario.start_epoch)
    player = SimulatedPlayer(env, preroll_subsystem=scenario.ads)

    dry_run = DryRunDispatcher() if cfg.endpoint.dry_run else None
    sink = dry_run or HttpBeaconDispatcher(
        timeout_s=cfg.endpoint.timeout_s, max_workers=cfg.endpoint.max_workers
    )

    try:
        session = heartbeat_tns_counter(
            player,
            cfg.session,
            timers=SimpyTimerScheduler(env),
            clock=clock,
            sink=sink,
            user_agent=scenario.user_agent,
            policy=cfg.policy,
            secure=cfg.endpoint.secure,
            logger=logger,
        )
        ScenarioService(env=env, player=player, steps=scenario.steps).start()

        logger.info(
            "starting scenario",
            extra={"session_id": session.session_id, "reason": f"until_s={scenario.until_s}"},
        )
        env.run(until=scenario.until_s)
    finally:
        sink.close()

    return RunResult(
        session_id=session.session_id,
        skew_s=session.skew_s,
        beacons_sent=session.beacons_sent,
        urls=list(dry_run.urls) if dry_run is not None else [],
    )


def run(config_path: str) -> RunResult:
    cfg = load_config(config_path)
    return simulate(cfg)
