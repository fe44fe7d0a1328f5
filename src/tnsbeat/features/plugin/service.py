from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from tnsbeat.core.clock import Clock
from tnsbeat.core.config import PolicyConfig
from tnsbeat.core.ids import deterministic_session_id
from tnsbeat.core.logging import get_logger
from tnsbeat.features.dispatch.service import BeaconSink
from tnsbeat.features.host.types import EventSourceHost
from tnsbeat.features.plugin.options import SessionOptions, merge_options
from tnsbeat.features.scheduler.service import BeaconSession
from tnsbeat.features.scheduler.types import HOST_EVENT_NAMES, PausePolicy
from tnsbeat.features.timers.service import TimerScheduler

__version__ = "1.1.0"


def heartbeat_tns_counter(
    host: EventSourceHost,
    options: Mapping[str, Any] | None = None,
    *,
    timers: TimerScheduler,
    clock: Clock,
    sink: BeaconSink,
    user_agent: str | None = None,
    policy: PolicyConfig | None = None,
    secure: bool = True,
    logger: logging.Logger | None = None,
) -> BeaconSession:
    """
    Attaches heartbeat beacons to a player.

    The session (and its clock-skew measurement) is created immediately;
    lifecycle subscriptions wait for the host's ready() hook when it has one.
    """
    logger = logger or get_logger("tnsbeat")
    policy = policy or PolicyConfig()

    merged = merge_options(options, user_agent=user_agent)
    session_id = deterministic_session_id(merged)

    session = BeaconSession(
        options=SessionOptions.from_mapping(merged),
        host=host,
        timers=timers,
        clock=clock,
        sink=sink,
        pause_policy=PausePolicy(policy.pause),
        dedupe=policy.dedupe,
        secure=secure,
        session_id=session_id,
        logger=logger,
    )

    def activate() -> None:
        logger.info(
            "heartbeatTnsCounter enabled",
            extra={"feature": "plugin", "session_id": session_id, "reason": repr(merged)},
        )
        for name in HOST_EVENT_NAMES:
            host.on(name, lambda name=name: session.handle_name(name))

    ready = getattr(host, "ready", None)
    if callable(ready):
        ready(activate)
    else:
        activate()

    return session
