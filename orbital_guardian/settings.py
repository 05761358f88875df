"""Service configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    objects_period_seconds: float = Field(10.0, alias="OBJECTS_PERIOD_SECONDS")
    alerts_period_seconds: float = Field(5.0, alias="ALERTS_PERIOD_SECONDS")
    conjunctions_period_seconds: float = Field(15.0, alias="CONJUNCTIONS_PERIOD_SECONDS")
    stats_period_seconds: float = Field(30.0, alias="STATS_PERIOD_SECONDS")
    heartbeat_period_seconds: float = Field(10.0, alias="HEARTBEAT_PERIOD_SECONDS")
    default_alert_threshold: float = Field(0.7, alias="DEFAULT_ALERT_THRESHOLD")
    default_tracking_interval_seconds: int = Field(30, alias="DEFAULT_TRACKING_INTERVAL_SECONDS")
    default_update_frequency_seconds: int = Field(10, alias="DEFAULT_UPDATE_FREQUENCY_SECONDS")
    real_time_updates: bool = Field(True, alias="REAL_TIME_UPDATES")
    log_format: Literal["json", "text"] = Field("json", alias="LOG_FORMAT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator(
        "objects_period_seconds",
        "alerts_period_seconds",
        "conjunctions_period_seconds",
        "stats_period_seconds",
        "heartbeat_period_seconds",
    )
    @classmethod
    def _positive_period(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timer periods must be positive")
        return value

    @field_validator("default_alert_threshold")
    @classmethod
    def _threshold_range(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("alert threshold must be within [0, 1]")
        return value

    def channel_periods(self) -> dict[str, float]:
        return {
            "objects": self.objects_period_seconds,
            "alerts": self.alerts_period_seconds,
            "conjunctions": self.conjunctions_period_seconds,
            "stats": self.stats_period_seconds,
        }


@lru_cache(maxsize=1)
def get_settings() -> ServiceConfig:
    return ServiceConfig()  # type: ignore[call-arg]


settings = get_settings()
