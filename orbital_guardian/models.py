"""Pydantic models for channel payloads and broadcaster state."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class SpaceObject(_Payload):
    id: str
    name: str
    type: Literal["satellite", "debris"]
    country: str
    launch_date: str
    altitude_km: float
    inclination_deg: float
    period_minutes: float
    status: Literal["active", "inactive", "decayed"]
    risk_level: Literal["high", "medium", "low"]
    last_update: datetime
    position: tuple[float, float, float] | None = Field(None, description="(longitude, latitude, altitude km)")
    velocity: tuple[float, float, float] | None = Field(None, description="(x, y, z) km/s")


class AlertItem(_Payload):
    id: str
    pair: str
    time: datetime
    risk: float
    miss_distance_km: float
    altitude_km: float
    relative_velocity_kms: float
    status: Literal["active", "acknowledged", "resolved"]
    priority: Literal["critical", "high", "medium", "low"]
    maneuver_suggested: bool = False
    estimated_impact_time: datetime | None = None
    confidence_level: float | None = None


class Conjunction(_Payload):
    id: str
    object_a: str
    object_b: str
    time: datetime
    miss_km: float
    risk: float
    probability: float | None = None
    recommended_action: Literal["monitor", "maneuver", "contact"] | None = None


class SystemStats(_Payload):
    total_objects: int
    active_alerts: int
    upcoming_conjunctions: int
    high_risk_objects: int
    system_health: Literal["healthy", "warning", "critical"]
    data_latency_ms: int
    last_update: datetime


class ConnectionStatus(str, Enum):
    CONNECTED = "connected"
    CONNECTING = "connecting"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class ConnectionState(_Payload):
    """Read-only copy of the connection health handed to consumers."""

    status: ConnectionStatus
    last_heartbeat: datetime
    data_latency_ms: int
    subscribed_channels: tuple[str, ...] = ()
    messages_received: int = 0
    connection_time: datetime
    error: str | None = None


class BroadcastSettings(BaseModel):
    """Runtime settings owned by the broadcaster."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tracking_interval_seconds: int = Field(30, gt=0, alias="trackingInterval")
    alert_threshold: float = Field(0.7, ge=0.0, le=1.0, alias="alertThreshold")
    real_time_updates_enabled: bool = Field(True, alias="realTimeUpdates")
    update_frequency_seconds: int = Field(10, gt=0, alias="updateFrequency")


class SettingsUpdate(BaseModel):
    """Partial settings change; unset fields keep their current value."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    tracking_interval_seconds: int | None = Field(None, gt=0, alias="trackingInterval")
    alert_threshold: float | None = Field(None, ge=0.0, le=1.0, alias="alertThreshold")
    real_time_updates_enabled: bool | None = Field(None, alias="realTimeUpdates")
    update_frequency_seconds: int | None = Field(None, gt=0, alias="updateFrequency")

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SystemStatus(_Payload):
    running: bool
    subscriber_count: int
    active_channels: tuple[str, ...]
    connection_status: ConnectionState


def to_wire(payload: Any) -> Any:
    """Convert a channel payload into JSON-compatible data."""
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True)
    if isinstance(payload, (list, tuple)):
        return [to_wire(item) for item in payload]
    return payload


__all__ = [
    "SpaceObject",
    "AlertItem",
    "Conjunction",
    "SystemStats",
    "ConnectionStatus",
    "ConnectionState",
    "BroadcastSettings",
    "SettingsUpdate",
    "SystemStatus",
    "to_wire",
]
