"""Timezone-aware UTC helpers shared by the producers, health model and logs."""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def from_epoch(seconds: float) -> datetime:
    """Aware UTC datetime for a POSIX timestamp such as ``LogRecord.created``."""
    return datetime.fromtimestamp(seconds, UTC)


def isoformat_utc(moment: datetime, with_z_suffix: bool = True) -> str:
    """ISO 8601 text for an aware datetime, normalised to UTC; ``Z`` suffix by default."""
    value = moment.astimezone(UTC).isoformat()
    return value.replace("+00:00", "Z") if with_z_suffix else value


def seconds_since(moment: datetime, now: datetime | None = None) -> float:
    """Elapsed seconds between ``moment`` and ``now`` (defaults to the current time)."""
    return ((now or utc_now()) - moment).total_seconds()


__all__ = ["utc_now", "from_epoch", "isoformat_utc", "seconds_since"]
