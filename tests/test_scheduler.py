"""Tests for the channel timer scheduler."""

import asyncio
import random

import pytest

from orbital_guardian.models import ConnectionStatus
from orbital_guardian.realtime.broadcaster import Broadcaster
from orbital_guardian.realtime.channels import Channel
from orbital_guardian.realtime.health import ConnectionHealth
from orbital_guardian.realtime.scheduler import Scheduler
from orbital_guardian.settings import ServiceConfig

FAST_PERIODS = {"objects": 0.02, "alerts": 0.02, "conjunctions": 0.02, "stats": 0.02}


def _make_scheduler(fired: list, connection_events: list, enabled=lambda: True, fire=None):
    health = ConnectionHealth(rng=random.Random(0))
    scheduler = Scheduler(
        health=health,
        fire=fire or fired.append,
        emit_connection=lambda: connection_events.append(health.snapshot().status),
        periods=FAST_PERIODS,
        heartbeat_period_seconds=0.02,
        enabled=enabled,
    )
    return scheduler, health


def test_start_requires_running_loop():
    scheduler, _ = _make_scheduler([], [])
    with pytest.raises(RuntimeError):
        scheduler.start()
    assert scheduler.running is False


def test_failed_first_subscribe_outside_loop_does_not_wedge_scheduler():
    periods = {f"{name}_period_seconds": 60 for name in (*FAST_PERIODS, "heartbeat")}
    broadcaster = Broadcaster(config=ServiceConfig(**periods))
    with pytest.raises(RuntimeError):
        broadcaster.subscribe("alerts", lambda payload: None)
    status = broadcaster.get_system_status()
    assert status.subscriber_count == 0
    assert status.running is False

    async def subscribe_inside_loop() -> bool:
        broadcaster.subscribe("stats", lambda payload: None)
        running = broadcaster.running
        await broadcaster.shutdown()
        return running

    assert asyncio.run(subscribe_inside_loop()) is True


@pytest.mark.asyncio
async def test_start_arms_every_timer_and_marks_connected():
    fired: list[Channel] = []
    connection_events: list[ConnectionStatus] = []
    scheduler, health = _make_scheduler(fired, connection_events)

    scheduler.start()
    try:
        assert scheduler.running is True
        assert connection_events == [ConnectionStatus.CONNECTED]
        assert sorted(job.name for job in scheduler.jobs) == sorted([*FAST_PERIODS, "heartbeat"])

        await asyncio.sleep(0.15)
        assert set(fired) == {Channel.OBJECTS, Channel.ALERTS, Channel.CONJUNCTIONS, Channel.STATS}
        # heartbeat re-emits the connection state
        assert len(connection_events) > 1
    finally:
        await scheduler.aclose()


@pytest.mark.asyncio
async def test_start_is_idempotent():
    connection_events: list[ConnectionStatus] = []
    scheduler, _ = _make_scheduler([], connection_events)
    scheduler.start()
    jobs = scheduler.jobs
    scheduler.start()
    assert scheduler.jobs == jobs
    assert connection_events == [ConnectionStatus.CONNECTED]
    await scheduler.aclose()


@pytest.mark.asyncio
async def test_stop_cancels_everything_and_reports_disconnect():
    fired: list[Channel] = []
    connection_events: list[ConnectionStatus] = []
    scheduler, health = _make_scheduler(fired, connection_events)

    scheduler.start()
    scheduler.stop()
    assert scheduler.running is False
    assert scheduler.jobs == ()
    assert connection_events[-1] is ConnectionStatus.DISCONNECTED
    assert health.status is ConnectionStatus.DISCONNECTED

    fired_before = len(fired)
    await asyncio.sleep(0.1)
    assert len(fired) == fired_before == 0
    await scheduler.aclose()


@pytest.mark.asyncio
async def test_restart_replaces_timers():
    connection_events: list[ConnectionStatus] = []
    scheduler, _ = _make_scheduler([], connection_events)
    scheduler.start()
    old_tasks = [job.task for job in scheduler.jobs]

    scheduler.restart()
    new_tasks = [job.task for job in scheduler.jobs]
    await asyncio.sleep(0)
    try:
        assert scheduler.running is True
        assert all(task.cancelled() or task.done() for task in old_tasks)
        assert not any(task.done() for task in new_tasks)
        assert connection_events == [
            ConnectionStatus.CONNECTED,
            ConnectionStatus.DISCONNECTED,
            ConnectionStatus.CONNECTED,
        ]
    finally:
        await scheduler.aclose()


@pytest.mark.asyncio
async def test_disabled_updates_skip_data_channels_but_keep_heartbeat():
    fired: list[Channel] = []
    connection_events: list[ConnectionStatus] = []
    scheduler, _ = _make_scheduler(fired, connection_events, enabled=lambda: False)
    scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.aclose()
    assert fired == []
    assert connection_events.count(ConnectionStatus.CONNECTED) > 1


@pytest.mark.asyncio
async def test_failing_fire_marks_error_and_keeps_timer_running():
    calls: list[Channel] = []
    connection_events: list[ConnectionStatus] = []

    def explode(channel: Channel) -> None:
        calls.append(channel)
        raise RuntimeError("producer blew up")

    scheduler, health = _make_scheduler([], connection_events, fire=explode)
    scheduler.start()
    await asyncio.sleep(0.1)
    try:
        assert ConnectionStatus.ERROR in connection_events
        assert health.error is not None and "producer blew up" in health.error
        assert calls.count(Channel.ALERTS) >= 2
        assert scheduler.running is True
    finally:
        await scheduler.aclose()
