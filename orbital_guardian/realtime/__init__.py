"""Realtime broadcasting for the tracking dashboard.

Multiplexes the objects, alerts, conjunctions, stats, connection and
settings channels to in-process subscribers.
"""

from .broadcaster import Broadcaster
from .channels import DATA_CHANNELS, Channel, parse_channel
from .health import ConnectionHealth
from .producers import PRODUCERS, produce_alerts, produce_conjunctions, produce_objects, produce_stats
from .registry import ChannelRegistry, Subscription
from .scheduler import Scheduler, TimerJob

__all__ = [
    "Broadcaster",
    "Channel",
    "DATA_CHANNELS",
    "parse_channel",
    "ConnectionHealth",
    "PRODUCERS",
    "produce_alerts",
    "produce_conjunctions",
    "produce_objects",
    "produce_stats",
    "ChannelRegistry",
    "Subscription",
    "Scheduler",
    "TimerJob",
]
