"""Connection health model for the realtime feed."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable
from datetime import datetime

from ..models import ConnectionState, ConnectionStatus
from ..utils.datetime import seconds_since, utc_now

logger = logging.getLogger(__name__)


class ConnectionHealth:
    """Tracks status, heartbeat, simulated latency and message counters.

    Mutated only by the scheduler and broadcaster; consumers receive
    :class:`ConnectionState` copies from :meth:`snapshot`.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock
        now = clock()
        self.status = ConnectionStatus.DISCONNECTED
        self.last_heartbeat = now
        self.connection_time = now
        self.data_latency_ms = 75
        self.messages_received = 0
        self.error: str | None = None

    def mark_connected(self) -> None:
        now = self._clock()
        self.status = ConnectionStatus.CONNECTED
        self.connection_time = now
        self.last_heartbeat = now
        self.messages_received = 0
        self.data_latency_ms = self._rng.randrange(50, 150)
        self.error = None
        logger.info("Realtime feed connected", extra={"connection": "connected", "latency_ms": self.data_latency_ms})

    def mark_connecting(self) -> None:
        self.status = ConnectionStatus.CONNECTING

    def mark_disconnected(self) -> None:
        self.status = ConnectionStatus.DISCONNECTED
        logger.info("Realtime feed disconnected", extra={"connection": "disconnected"})

    def mark_error(self, reason: str) -> None:
        self.status = ConnectionStatus.ERROR
        self.error = reason
        logger.warning("Realtime feed degraded: %s", reason, extra={"connection": "error"})

    def record_heartbeat(self) -> bool:
        if self.status is not ConnectionStatus.CONNECTED:
            return False
        now = self._clock()
        gap = seconds_since(self.last_heartbeat, now)
        self.last_heartbeat = now
        self.data_latency_ms = self._rng.randrange(30, 180)
        logger.debug("Heartbeat recorded", extra={"gap_seconds": round(gap, 3), "latency_ms": self.data_latency_ms})
        return True

    def record_message(self) -> None:
        self.messages_received += 1
        self.last_heartbeat = self._clock()
        if self.status is ConnectionStatus.ERROR:
            # A successful emission after a failed one means the feed recovered.
            self.status = ConnectionStatus.CONNECTED
            self.error = None

    def snapshot(self, subscribed_channels: Iterable[str] = ()) -> ConnectionState:
        return ConnectionState(
            status=self.status,
            last_heartbeat=self.last_heartbeat,
            data_latency_ms=self.data_latency_ms,
            subscribed_channels=tuple(sorted(subscribed_channels)),
            messages_received=self.messages_received,
            connection_time=self.connection_time,
            error=self.error,
        )


__all__ = ["ConnectionHealth"]
