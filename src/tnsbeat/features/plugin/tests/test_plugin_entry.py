from __future__ import annotations

import simpy

from tnsbeat.core.clock import SimClock
from tnsbeat.core.config import PolicyConfig
from tnsbeat.features.host.simulated import SimulatedPlayer
from tnsbeat.features.plugin.service import __version__, heartbeat_tns_counter
from tnsbeat.features.scheduler.types import PausePolicy
from tnsbeat.features.timers.service import SimpyTimerScheduler


class DummySink:
    def __init__(self) -> None:
        self.urls: list[str] = []

    def dispatch(self, url: str) -> None:
        self.urls.append(url)


def attach(player, env, options=None, **kwargs):
    sink = DummySink()
    session = heartbeat_tns_counter(
        player,
        options or {"TnsAccount": "ACC", "tmsec": "sec1", "catid": "A"},
        timers=SimpyTimerScheduler(env),
        clock=SimClock(env=env, start_epoch=1000),
        sink=sink,
        **kwargs,
    )
    return session, sink


def test_attach_subscribes_to_player_events():
    env = simpy.Environment()
    player = SimulatedPlayer(env)
    session, sink = attach(player, env)

    player.play()
    env.run(until=61)

    assert len(sink.urls) == 3
    assert sink.urls[0] == (
        "https://www.tns-counter.ru/V13a**catid:A:vcver:0:fts:0:vts:1000:evtp:2:dvtp:1"
        "**ACC/ru/UTF-8/tmsec=sec1/"
    )
    assert session.session_id is not None


def test_activation_waits_for_player_ready():
    env = simpy.Environment()
    player = SimulatedPlayer(env, ready=False)
    _, sink = attach(player, env)

    player.play()
    assert sink.urls == []

    player.pause()
    player.mark_ready()
    player.play()
    assert len(sink.urls) == 1


def test_skew_measured_at_attach_time():
    env = simpy.Environment()
    player = SimulatedPlayer(env, ready=False)
    session, _ = attach(
        player,
        env,
        {"TnsAccount": "ACC", "tmsec": "s", "live": True, "serverTimestamp": 990},
    )
    env.run(until=500)
    player.mark_ready()

    assert session.skew_s == 10


def test_policy_is_passed_through():
    env = simpy.Environment()
    session, _ = attach(
        SimulatedPlayer(env), env, policy=PolicyConfig(pause="freeze", dedupe=True)
    )
    assert session.cfg.pause_policy is PausePolicy.FREEZE
    assert session.cfg.dedupe is True


def test_http_scheme_when_page_is_not_secure():
    env = simpy.Environment()
    player = SimulatedPlayer(env)
    _, sink = attach(player, env, secure=False)
    player.play()
    assert sink.urls[0].startswith("http://www.tns-counter.ru/")


def test_same_options_same_session_id():
    env = simpy.Environment()
    s1, _ = attach(SimulatedPlayer(env), env)
    s2, _ = attach(SimulatedPlayer(env), env)
    s3, _ = attach(SimulatedPlayer(env), env, {"TnsAccount": "OTHER"})

    assert s1.session_id == s2.session_id
    assert s1.session_id != s3.session_id


def test_version_is_exposed():
    assert __version__.count(".") == 2
