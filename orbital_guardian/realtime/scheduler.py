"""Recurring timers that drive channel production."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from ..metrics import record_producer_failure, record_scheduler_transition
from .channels import DATA_CHANNELS, HEARTBEAT, Channel
from .health import ConnectionHealth

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TimerJob:
    name: str
    period_seconds: float
    action: Callable[[], None]
    task: asyncio.Task[None] | None = field(default=None, init=False)
    fires: int = field(default=0, init=False)


class Scheduler:
    """Owns one timer per data channel plus the heartbeat timer.

    All timers are armed together by :meth:`start` and cancelled together by
    :meth:`stop`. Must be started from inside a running event loop.
    """

    def __init__(
        self,
        health: ConnectionHealth,
        fire: Callable[[Channel], None],
        emit_connection: Callable[[], None],
        periods: Mapping[str, float],
        heartbeat_period_seconds: float,
        enabled: Callable[[], bool] = lambda: True,
    ) -> None:
        self._health = health
        self._fire = fire
        self._emit_connection = emit_connection
        self._enabled = enabled
        self._periods = dict(periods)
        self._heartbeat_period = heartbeat_period_seconds
        self._jobs: list[TimerJob] = []
        self._cancelled: list[asyncio.Task[None]] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def jobs(self) -> tuple[TimerJob, ...]:
        return tuple(self._jobs)

    def start(self) -> None:
        if self._running:
            return
        loop = asyncio.get_running_loop()
        self._running = True
        self._health.mark_connected()
        self._emit_connection()

        self._jobs = [
            TimerJob(
                name=channel.value,
                period_seconds=self._periods[channel.value],
                action=lambda channel=channel: self._fire_channel(channel),
            )
            for channel in DATA_CHANNELS
        ]
        self._jobs.append(TimerJob(name=HEARTBEAT, period_seconds=self._heartbeat_period, action=self._heartbeat))
        for job in self._jobs:
            job.task = loop.create_task(self._run_job(job), name=f"realtime-{job.name}")
        record_scheduler_transition("start")
        logger.info("Scheduler started with %d timers", len(self._jobs), extra={"transition": "start"})

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._cancelled = [task for task in self._cancelled if not task.done()]
        for job in self._jobs:
            if job.task is None:
                continue
            job.task.cancel()
            self._cancelled.append(job.task)
            job.task = None
        self._jobs = []
        self._health.mark_disconnected()
        self._emit_connection()
        record_scheduler_transition("stop")
        logger.info("Scheduler stopped", extra={"transition": "stop"})

    def restart(self) -> None:
        self.stop()
        self.start()

    async def aclose(self) -> None:
        """Stop and wait for every cancelled timer task to finish."""
        self.stop()
        pending, self._cancelled = self._cancelled, []
        await asyncio.gather(*pending, return_exceptions=True)

    async def _run_job(self, job: TimerJob) -> None:
        while True:
            await asyncio.sleep(job.period_seconds)
            job.fires += 1
            try:
                job.action()
            except asyncio.CancelledError:  # pragma: no cover - cooperative cancellation
                raise
            except Exception as exc:
                logger.exception("Timer %s failed", job.name, extra={"channel": job.name})
                record_producer_failure(job.name)
                self._health.mark_error(f"{job.name}: {exc}")
                self._emit_connection()

    def _fire_channel(self, channel: Channel) -> None:
        if not self._enabled():
            logger.debug("Real-time updates disabled; skipping %s", channel.value, extra={"channel": channel.value})
            return
        self._fire(channel)

    def _heartbeat(self) -> None:
        if self._health.record_heartbeat():
            self._emit_connection()


__all__ = ["TimerJob", "Scheduler"]
