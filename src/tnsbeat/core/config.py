from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

PAUSE_POLICIES = ("stop", "freeze")


@dataclass(frozen=True)
class PolicyConfig:
    """
    pause:
      - "stop"   -> pause cancels the timer, next play re-arms it
      - "freeze" -> timer keeps running, ticks report the paused snapshot
    dedupe:
      - skip a tick when the rounded playback position did not move
    """

    pause: str = "stop"
    dedupe: bool = False


@dataclass(frozen=True)
class EndpointConfig:
    secure: bool = True
    timeout_s: float = 5.0
    dry_run: bool = True
    max_workers: int = 2


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class ScenarioStep:
    at: float
    event: str
    position: float | None = None


@dataclass(frozen=True)
class ScenarioConfig:
    start_epoch: float
    until_s: float
    realtime: bool = False
    realtime_factor: float = 1.0
    user_agent: str | None = None
    ads: bool = False
    steps: tuple[ScenarioStep, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class HeartbeatConfig:
    session: dict[str, Any]  # plugin options, merged over defaults later
    policy: PolicyConfig
    endpoint: EndpointConfig
    logging: LoggingConfig
    scenario: ScenarioConfig | None
    raw: dict[str, Any]  # original parsed YAML (for hashing / debugging)


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    data = yaml.safe_load(p.read_text())
    if not isinstance(data, dict):
        raise ValueError("Config YAML must parse to a dict at the top level.")
    return data


def _parse_policy(policy: dict[str, Any]) -> PolicyConfig:
    pause = str(policy.get("pause", "stop")).strip().lower()
    if pause not in PAUSE_POLICIES:
        raise ValueError(f"Unsupported policy.pause={pause!r}. Allowed={list(PAUSE_POLICIES)}")
    return PolicyConfig(pause=pause, dedupe=bool(policy.get("dedupe", False)))


def _parse_scenario(scenario: dict[str, Any]) -> ScenarioConfig:
    steps: list[ScenarioStep] = []
    for i, s in enumerate(scenario.get("steps") or []):
        if not isinstance(s, dict) or "event" not in s:
            raise ValueError(f"scenario.steps[{i}] must be a mapping with an 'event' key")
        position = s.get("position")
        steps.append(
            ScenarioStep(
                at=float(s.get("at", 0.0)),
                event=str(s["event"]),
                position=None if position is None else float(position),
            )
        )

    realtime_factor = float(scenario.get("realtime_factor", 1.0))
    if realtime_factor <= 0:
        raise ValueError("scenario.realtime_factor must be > 0")

    return ScenarioConfig(
        start_epoch=float(scenario["start_epoch"]),
        until_s=float(scenario["until_s"]),
        realtime=bool(scenario.get("realtime", False)),
        realtime_factor=realtime_factor,
        user_agent=scenario.get("user_agent"),
        ads=bool(scenario.get("ads", False)),
        steps=tuple(sorted(steps, key=lambda st: st.at)),
    )


def parse_config(data: dict[str, Any]) -> HeartbeatConfig:
    if "session" not in data:
        raise ValueError("Missing required top-level config section: 'session'")

    session = data.get("session") or {}
    if not isinstance(session, dict):
        raise ValueError("'session' must be a mapping of plugin options")

    if "interval" in session and int(session["interval"]) <= 0:
        raise ValueError("session.interval must be > 0 (milliseconds)")

    endpoint = data.get("endpoint") or {}
    logging_cfg = data.get("logging") or {}

    endpoint_cfg = EndpointConfig(
        secure=bool(endpoint.get("secure", True)),
        timeout_s=float(endpoint.get("timeout_s", 5.0)),
        dry_run=bool(endpoint.get("dry_run", True)),
        max_workers=int(endpoint.get("max_workers", 2)),
    )

    scenario_cfg = None
    if data.get("scenario") is not None:
        scenario_cfg = _parse_scenario(data["scenario"])

    return HeartbeatConfig(
        session=dict(session),
        policy=_parse_policy(data.get("policy") or {}),
        endpoint=endpoint_cfg,
        logging=LoggingConfig(level=str(logging_cfg.get("level", "INFO")).upper()),
        scenario=scenario_cfg,
        raw=data,
    )


def load_config(path: str | Path) -> HeartbeatConfig:
    data = load_yaml(path)
    return parse_config(data)
