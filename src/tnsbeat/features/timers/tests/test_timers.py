from __future__ import annotations

import pytest
import simpy

from tnsbeat.features.timers.service import SimpyTimerScheduler


def test_recurring_timer_fires_every_interval():
    env = simpy.Environment()
    timers = SimpyTimerScheduler(env)
    fired: list[float] = []

    timers.schedule(30_000, lambda: fired.append(env.now))
    env.run(until=95)

    assert fired == [30.0, 60.0, 90.0]


def test_cancel_stops_future_ticks():
    env = simpy.Environment()
    timers = SimpyTimerScheduler(env)
    fired: list[float] = []

    token = timers.schedule(10_000, lambda: fired.append(env.now))
    env.run(until=25)
    token.cancel()
    env.run(until=100)

    assert fired == [10.0, 20.0]
    assert timers.active_count == 0


def test_cancel_is_idempotent():
    env = simpy.Environment()
    token = SimpyTimerScheduler(env).schedule(1000, lambda: None)
    token.cancel()
    token.cancel()
    assert token.cancelled


def test_callback_may_cancel_its_own_timer():
    env = simpy.Environment()
    timers = SimpyTimerScheduler(env)
    fired: list[float] = []
    holder = {}

    def cb() -> None:
        fired.append(env.now)
        if len(fired) == 2:
            holder["token"].cancel()

    holder["token"] = timers.schedule(5000, cb)
    env.run(until=60)

    assert fired == [5.0, 10.0]


def test_cancel_at_the_same_instant_as_a_due_tick_wins():
    env = simpy.Environment()
    timers = SimpyTimerScheduler(env)
    fired: list[float] = []
    holder = {}

    def canceller():
        yield env.timeout(10)
        holder["token"].cancel()

    # the canceller's timeout is queued first, so it resolves first at t=10
    env.process(canceller())
    holder["token"] = timers.schedule(10_000, lambda: fired.append(env.now))
    env.run(until=50)

    assert fired == []


def test_cancelled_timers_are_not_retained():
    env = simpy.Environment()
    timers = SimpyTimerScheduler(env)

    for _ in range(500):
        timers.schedule(1000, lambda: None).cancel()
    timers.schedule(1000, lambda: None)

    assert len(timers._tokens) == 1
    assert timers.active_count == 1


def test_rejects_non_positive_interval():
    env = simpy.Environment()
    with pytest.raises(ValueError):
        SimpyTimerScheduler(env).schedule(0, lambda: None)
