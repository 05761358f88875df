"""Prometheus metrics instrumentation for the realtime broadcaster."""

from __future__ import annotations

from contextlib import contextmanager
from time import perf_counter

from prometheus_client import Counter, Gauge, Histogram, generate_latest

channel_emissions_total = Counter(
    "realtime_channel_emissions_total",
    "Payloads fanned out grouped by channel",
    labelnames=("channel",),
)

subscriber_failures_total = Counter(
    "realtime_subscriber_failures_total",
    "Subscriber callbacks that raised during fan-out",
    labelnames=("channel",),
)

producer_failures_total = Counter(
    "realtime_producer_failures_total",
    "Producer invocations that raised inside a timer",
    labelnames=("channel",),
)

producer_duration_seconds = Histogram(
    "realtime_producer_duration_seconds",
    "Time spent synthesising a channel payload",
    labelnames=("channel",),
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1),
)

scheduler_transitions_total = Counter(
    "realtime_scheduler_transitions_total",
    "Scheduler start/stop transitions",
    labelnames=("transition",),
)

active_subscribers_gauge = Gauge(
    "realtime_active_subscribers",
    "Current subscriber callbacks across all channels",
)


@contextmanager
def record_production(channel: str):
    start = perf_counter()
    try:
        yield
    finally:
        producer_duration_seconds.labels(channel=channel).observe(perf_counter() - start)


def record_emission(channel: str) -> None:
    channel_emissions_total.labels(channel=channel).inc()


def record_subscriber_failure(channel: str) -> None:
    subscriber_failures_total.labels(channel=channel).inc()


def record_producer_failure(channel: str) -> None:
    producer_failures_total.labels(channel=channel).inc()


def record_scheduler_transition(transition: str) -> None:
    scheduler_transitions_total.labels(transition=transition).inc()


def set_active_subscribers(count: int) -> None:
    active_subscribers_gauge.set(count)


def latest_metrics() -> bytes:
    return generate_latest()


__all__ = [
    "record_production",
    "record_emission",
    "record_subscriber_failure",
    "record_producer_failure",
    "record_scheduler_transition",
    "set_active_subscribers",
    "latest_metrics",
]
