"""Subscriber bookkeeping for realtime channels."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..metrics import set_active_subscribers
from .channels import Channel

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]


@dataclass(frozen=True, slots=True, eq=False)
class Subscription:
    """Handle for one registration; compared by identity, not by callback."""

    channel: Channel
    callback: Callback


class ChannelRegistry:
    """Maps each channel to the callbacks subscribed to it.

    ``on_active`` fires when the first callback is registered while the
    registry is empty; ``on_idle`` fires when the last one is removed. If
    ``on_active`` raises, the registration is rolled back so the next
    subscriber retries activation.
    """

    def __init__(
        self,
        on_active: Callable[[], None] | None = None,
        on_idle: Callable[[], None] | None = None,
    ) -> None:
        self._subscribers: dict[Channel, dict[Callback, Subscription]] = {}
        self._on_active = on_active
        self._on_idle = on_idle

    def subscribe(self, channel: Channel, callback: Callback) -> Subscription:
        was_idle = not self._subscribers
        entries = self._subscribers.setdefault(channel, {})
        subscription = entries.get(callback)
        if subscription is not None:
            return subscription

        subscription = entries[callback] = Subscription(channel=channel, callback=callback)
        if was_idle and self._on_active is not None:
            try:
                self._on_active()
            except Exception:
                self._drop(channel, callback)
                raise
        set_active_subscribers(self.subscriber_count())
        logger.debug("Subscriber added", extra={"channel": channel.value, "subscribers": len(entries)})
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove ``subscription``; stale or repeated handles are ignored."""
        entries = self._subscribers.get(subscription.channel)
        if entries is None or entries.get(subscription.callback) is not subscription:
            return
        self._remove(subscription.channel, subscription.callback)

    def discard(self, channel: Channel, callback: Callback) -> None:
        """Remove ``callback`` from ``channel`` whichever handle registered it."""
        entries = self._subscribers.get(channel)
        if entries is None or callback not in entries:
            return
        self._remove(channel, callback)

    def _remove(self, channel: Channel, callback: Callback) -> None:
        self._drop(channel, callback)
        set_active_subscribers(self.subscriber_count())
        logger.debug("Subscriber removed", extra={"channel": channel.value})
        if not self._subscribers and self._on_idle is not None:
            self._on_idle()

    def _drop(self, channel: Channel, callback: Callback) -> None:
        entries = self._subscribers[channel]
        del entries[callback]
        if not entries:
            del self._subscribers[channel]

    def subscribers(self, channel: Channel) -> tuple[Callback, ...]:
        return tuple(self._subscribers.get(channel, ()))

    def active_channels(self) -> frozenset[Channel]:
        return frozenset(self._subscribers)

    def subscriber_count(self) -> int:
        return sum(len(entries) for entries in self._subscribers.values())

    def clear(self) -> None:
        """Drop every subscription without firing ``on_idle``."""
        self._subscribers.clear()
        set_active_subscribers(0)


__all__ = ["Callback", "Subscription", "ChannelRegistry"]
