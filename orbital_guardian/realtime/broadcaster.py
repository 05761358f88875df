"""Realtime broadcaster facade.

Composes the channel registry, connection health model, producers and
scheduler behind the surface consumed by the dashboard::

    broadcaster = Broadcaster()
    unsubscribe = broadcaster.subscribe("alerts", on_alerts)
    broadcaster.update_settings(alertThreshold=0.9)
    ...
    unsubscribe()

One instance is owned by the hosting application; nothing here is a
module-level singleton.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Mapping
from typing import Any

from ..metrics import record_emission, record_producer_failure, record_production, record_subscriber_failure
from ..models import BroadcastSettings, ConnectionState, ConnectionStatus, SettingsUpdate, SystemStatus
from ..settings import ServiceConfig
from ..settings import settings as service_config
from .channels import Channel, parse_channel
from .health import ConnectionHealth
from .producers import PRODUCERS, Producer
from .registry import Callback, ChannelRegistry
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


def _noop() -> None:
    return None


class Broadcaster:
    def __init__(
        self,
        config: ServiceConfig | None = None,
        initial_settings: BroadcastSettings | None = None,
        rng: random.Random | None = None,
        producers: Mapping[Channel, Producer] | None = None,
    ) -> None:
        self._config = config or service_config
        self._settings = initial_settings or BroadcastSettings(
            tracking_interval_seconds=self._config.default_tracking_interval_seconds,
            alert_threshold=self._config.default_alert_threshold,
            real_time_updates_enabled=self._config.real_time_updates,
            update_frequency_seconds=self._config.default_update_frequency_seconds,
        )
        self._rng = rng or random.Random()
        self._producers: dict[Channel, Producer] = dict(producers or PRODUCERS)
        self._health = ConnectionHealth(rng=self._rng)
        self._scheduler = Scheduler(
            health=self._health,
            fire=self._publish,
            emit_connection=self._emit_connection,
            periods=self._config.channel_periods(),
            heartbeat_period_seconds=self._config.heartbeat_period_seconds,
            enabled=lambda: self._settings.real_time_updates_enabled,
        )
        self._registry = ChannelRegistry(on_active=self._scheduler.start, on_idle=self._scheduler.stop)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, channel: str | Channel, callback: Callback) -> Callable[[], None]:
        """Register ``callback`` on ``channel`` and return its unsubscribe function.

        The first subscription starts the scheduler. The returned function
        may be called any number of times.
        """
        resolved = parse_channel(channel)
        if resolved is None:
            logger.warning("Ignoring subscription to unknown channel: %s", channel)
            return _noop

        subscription = self._registry.subscribe(resolved, callback)

        def unsubscribe() -> None:
            self._registry.unsubscribe(subscription)

        return unsubscribe

    def unsubscribe(self, channel: str | Channel, callback: Callback) -> None:
        resolved = parse_channel(channel)
        if resolved is not None:
            self._registry.discard(resolved, callback)

    def emit(self, channel: Channel, payload: Any) -> int:
        """Deliver ``payload`` to every subscriber of ``channel``.

        Each callback runs in its own failure boundary; returns how many
        callbacks raised.
        """
        failures = 0
        for callback in self._registry.subscribers(channel):
            try:
                callback(payload)
            except Exception:
                failures += 1
                record_subscriber_failure(channel.value)
                logger.exception("Error in %s subscriber", channel.value, extra={"channel": channel.value})
        record_emission(channel.value)
        return failures

    # ------------------------------------------------------------------
    # Production
    # ------------------------------------------------------------------
    def trigger_update(self, channel: str | Channel) -> Any:
        """Produce and emit ``channel`` immediately, outside the timer cadence.

        Returns the payload, or ``None`` when the channel has no producer or
        the producer failed. A failure marks the connection ``error`` the same
        way a failing timer does.
        """
        resolved = parse_channel(channel)
        if resolved is None:
            logger.warning("Unknown channel: %s", channel)
            return None
        if resolved not in self._producers:
            logger.warning("Channel %s has no producer; nothing to trigger", resolved.value)
            return None
        try:
            return self._publish(resolved)
        except Exception as exc:
            logger.exception("Manual %s update failed", resolved.value, extra={"channel": resolved.value})
            record_producer_failure(resolved.value)
            self._health.mark_error(f"{resolved.value}: {exc}")
            self._emit_connection()
            return None

    def _publish(self, channel: Channel) -> Any:
        producer = self._producers[channel]
        with record_production(channel.value):
            payload = producer(self._settings, self._rng)
        recovered = self._health.status is ConnectionStatus.ERROR
        self._health.record_message()
        self.emit(channel, payload)
        if recovered:
            self._emit_connection()
        return payload

    def _emit_connection(self) -> None:
        self.emit(Channel.CONNECTION, self.get_connection_status())

    # ------------------------------------------------------------------
    # Settings & connection control
    # ------------------------------------------------------------------
    def update_settings(
        self,
        update: SettingsUpdate | Mapping[str, Any] | None = None,
        **changes: Any,
    ) -> BroadcastSettings:
        """Validate and merge a partial settings change.

        Raises ``pydantic.ValidationError`` for out-of-range or unknown fields,
        leaving the current settings untouched. A running scheduler is
        restarted so the new values apply to every subsequent timer fire.
        Keyword changes cannot be combined with a ``SettingsUpdate`` instance.
        """
        if isinstance(update, SettingsUpdate) and changes:
            raise TypeError("Pass either a SettingsUpdate or keyword changes, not both")
        if update is None:
            update = SettingsUpdate.model_validate(changes)
        elif not isinstance(update, SettingsUpdate):
            update = SettingsUpdate.model_validate({**update, **changes})

        self._settings = self._settings.model_copy(update=update.changes())
        logger.info("Settings updated", extra={"changes": update.changes()})
        self.emit(Channel.SETTINGS, self.get_settings())
        if self._scheduler.running:
            self._scheduler.restart()
        return self.get_settings()

    def reconnect(self) -> None:
        """Reset the connection and re-arm timers when anyone is listening."""
        if self._scheduler.running:
            self._scheduler.stop()
        self._health.mark_connected()
        self._emit_connection()
        if self._registry.subscriber_count() > 0:
            self._scheduler.start()

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    def get_settings(self) -> BroadcastSettings:
        return self._settings.model_copy()

    def get_connection_status(self) -> ConnectionState:
        return self._health.snapshot(channel.value for channel in self._registry.active_channels())

    def get_system_status(self) -> SystemStatus:
        active = sorted(channel.value for channel in self._registry.active_channels())
        return SystemStatus(
            running=self._scheduler.running,
            subscriber_count=self._registry.subscriber_count(),
            active_channels=tuple(active),
            connection_status=self.get_connection_status(),
        )

    async def shutdown(self) -> None:
        """Drop all subscribers and wait for the timers to wind down."""
        self._registry.clear()
        await self._scheduler.aclose()


__all__ = ["Broadcaster"]
