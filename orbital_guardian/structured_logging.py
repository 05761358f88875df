"""JSON log lines for the realtime service.

Every line carries the correlation id of the HTTP request or WebSocket
session that caused it. Realtime context passed through ``extra``
(channel, scheduler transition, connection state, subscriber counts,
latencies) is grouped under a ``realtime`` object so dashboards can
filter on ``realtime.channel`` without knowing which module logged.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from orbital_guardian.utils.datetime import from_epoch, isoformat_utc

SERVICE_NAME = "orbital-guardian-realtime"

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

REALTIME_FIELDS = ("channel", "transition", "connection", "subscribers", "latency_ms", "gap_seconds")

# Attributes every LogRecord has; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def get_correlation_id() -> str:
    """Current correlation id; background work (timers) gets a fresh one."""
    cid = correlation_id.get()
    if not cid:
        cid = str(uuid.uuid4())
        correlation_id.set(cid)
    return cid


def set_correlation_id(cid: str) -> None:
    correlation_id.set(cid)


@contextmanager
def correlation_scope(cid: str | None = None) -> Iterator[str]:
    """Bind a correlation id for one request or socket session, then restore the previous one."""
    token = correlation_id.set(cid or str(uuid.uuid4()))
    try:
        yield correlation_id.get()
    finally:
        correlation_id.reset(token)


class StructuredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": isoformat_utc(from_epoch(record.created)),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": get_correlation_id(),
        }

        realtime: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS:
                continue
            if key in REALTIME_FIELDS:
                realtime[key] = value
            else:
                log_data[key] = value
        if realtime:
            log_data["realtime"] = realtime

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_structured_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


__all__ = [
    "REALTIME_FIELDS",
    "StructuredFormatter",
    "configure_structured_logging",
    "correlation_scope",
    "get_correlation_id",
    "set_correlation_id",
]
