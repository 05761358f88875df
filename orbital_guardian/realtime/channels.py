"""
Channel names for realtime broadcasts.

Data channels are produced on their own timers; ``connection`` and
``settings`` are only emitted as side effects of state changes.
"""

from __future__ import annotations

from enum import Enum


class Channel(str, Enum):
    OBJECTS = "objects"
    ALERTS = "alerts"
    CONJUNCTIONS = "conjunctions"
    STATS = "stats"
    CONNECTION = "connection"
    SETTINGS = "settings"


DATA_CHANNELS: tuple[Channel, ...] = (
    Channel.OBJECTS,
    Channel.ALERTS,
    Channel.CONJUNCTIONS,
    Channel.STATS,
)

# Heartbeat is a timer, not a subscriber-visible channel.
HEARTBEAT = "heartbeat"


def parse_channel(name: str | Channel) -> Channel | None:
    """Return the channel for ``name`` or ``None`` when it is unknown."""
    if isinstance(name, Channel):
        return name
    try:
        return Channel(name)
    except ValueError:
        return None


__all__ = ["Channel", "DATA_CHANNELS", "HEARTBEAT", "parse_channel"]
