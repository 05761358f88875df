"""Payload producers for the simulated tracking feed.

Each producer reads the current :class:`BroadcastSettings` and returns a
fresh immutable payload. Randomness comes from the ``rng`` argument so
callers can seed it; producers never touch shared state.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from ..models import AlertItem, BroadcastSettings, Conjunction, SpaceObject, SystemStats
from ..utils.datetime import utc_now
from .channels import Channel

Producer = Callable[[BroadcastSettings, random.Random], Any]

# Tracked catalogue: (id, name, type, country, launch date, altitude km, inclination deg, period min, status)
CATALOGUE: tuple[tuple[str, str, str, str, str, float, float, float, str], ...] = (
    ("SAT-2391", "Starlink-4521", "satellite", "USA", "2023-03-15", 550.0, 53.2, 95.5, "active"),
    ("DEB-9921", "Cosmos-1408 Fragment", "debris", "Russia", "1982-09-20", 485.0, 82.6, 93.8, "inactive"),
    ("SAT-4521", "Sentinel-2B", "satellite", "ESA", "2017-03-07", 786.0, 98.6, 100.4, "active"),
    ("DEB-5563", "Fengyun-1C Fragment", "debris", "China", "1999-05-10", 865.0, 98.8, 102.1, "inactive"),
    ("SAT-7821", "GPS III SV03", "satellite", "USA", "2020-06-30", 20180.0, 55.0, 718.0, "active"),
    ("DEB-2193", "Iridium-33 Fragment", "debris", "USA", "1997-09-14", 790.0, 86.4, 100.8, "inactive"),
    ("SAT-1042", "Terra (EOS AM-1)", "satellite", "USA", "1999-12-18", 705.0, 98.2, 98.9, "active"),
    ("SAT-6677", "OneWeb-0123", "satellite", "UK", "2022-04-01", 1200.0, 87.4, 109.5, "active"),
    ("DEB-8891", "ASAT Test Fragment", "debris", "India", "2008-10-22", 650.0, 97.9, 97.8, "inactive"),
    ("DEB-1002", "SL-16 R/B Fragment", "debris", "Russia", "2019-07-05", 420.0, 51.6, 92.1, "decayed"),
)

TOTAL_OBJECTS_BASELINE = 34327
TOTAL_OBJECTS_JITTER = 50
ACTIVE_ALERTS_BASELINE = 8
UPCOMING_CONJUNCTIONS_BASELINE = 45
HIGH_RISK_OBJECTS_BASELINE = 15

MIN_ALERT_CANDIDATES = 3
MAX_ALERT_CANDIDATES = 7
CONJUNCTION_COUNT = 3
PREDICTION_HORIZON_SECONDS = 2 * 3600


def priority_for_risk(risk: float) -> str:
    if risk > 0.9:
        return "critical"
    if risk > 0.8:
        return "high"
    if risk > 0.6:
        return "medium"
    return "low"


def _risk_bucket(rng: random.Random) -> str:
    if rng.random() > 0.8:
        return "high"
    if rng.random() > 0.5:
        return "medium"
    return "low"


def produce_objects(settings: BroadcastSettings, rng: random.Random) -> tuple[SpaceObject, ...]:
    now = utc_now()
    objects = []
    for obj_id, name, obj_type, country, launched, altitude, inclination, period, status in CATALOGUE:
        jittered_altitude = altitude + rng.uniform(-5.0, 5.0)
        objects.append(
            SpaceObject(
                id=obj_id,
                name=name,
                type=obj_type,
                country=country,
                launch_date=launched,
                altitude_km=jittered_altitude,
                inclination_deg=inclination,
                period_minutes=period + rng.uniform(-0.05, 0.05),
                status=status,
                risk_level=_risk_bucket(rng),
                last_update=now,
                position=(
                    rng.uniform(-180.0, 180.0),
                    rng.uniform(-90.0, 90.0),
                    jittered_altitude + rng.uniform(0.0, 100.0),
                ),
            )
        )
    return tuple(objects)


def produce_alerts(settings: BroadcastSettings, rng: random.Random) -> tuple[AlertItem, ...]:
    """Sample 3-7 candidates and keep those at or above the alert threshold."""
    now = utc_now()
    stamp = int(now.timestamp() * 1000)
    threshold = settings.alert_threshold
    alerts = []
    for index in range(rng.randint(MIN_ALERT_CANDIDATES, MAX_ALERT_CANDIDATES)):
        risk = rng.random()
        if risk < threshold:
            continue
        alerts.append(
            AlertItem(
                id=f"AL-{stamp}-{index}",
                pair=f"SAT-{2000 + index} × DEB-{1000 + rng.randrange(9999)}",
                time=now + timedelta(seconds=rng.uniform(0, PREDICTION_HORIZON_SECONDS)),
                risk=risk,
                miss_distance_km=rng.uniform(0.0, 3.0),
                altitude_km=rng.uniform(400.0, 800.0),
                relative_velocity_kms=rng.uniform(5.0, 15.0),
                status="acknowledged" if rng.random() > 0.8 else "active",
                priority=priority_for_risk(risk),
                maneuver_suggested=risk > 0.8,
                estimated_impact_time=now + timedelta(seconds=rng.uniform(0, 3600)),
                confidence_level=rng.uniform(0.7, 1.0),
            )
        )
    alerts.sort(key=lambda alert: alert.risk, reverse=True)
    return tuple(alerts)


def _recommended_action(risk: float) -> str:
    if risk > 0.8:
        return "maneuver"
    if risk > 0.6:
        return "contact"
    return "monitor"


def produce_conjunctions(settings: BroadcastSettings, rng: random.Random) -> tuple[Conjunction, ...]:
    now = utc_now()
    satellites = [entry[0] for entry in CATALOGUE if entry[2] == "satellite"]
    debris = [entry[0] for entry in CATALOGUE if entry[2] == "debris"]
    conjunctions = []
    for _ in range(CONJUNCTION_COUNT):
        miss_km = rng.uniform(0.0, 5.0)
        risk = rng.random()
        conjunctions.append(
            Conjunction(
                id=f"CJ-{rng.randrange(10000)}",
                object_a=rng.choice(satellites),
                object_b=rng.choice(debris),
                time=now + timedelta(seconds=rng.uniform(0, PREDICTION_HORIZON_SECONDS)),
                miss_km=miss_km,
                risk=risk,
                probability=round(risk * (1.0 - miss_km / 5.0), 4),
                recommended_action=_recommended_action(risk),
            )
        )
    return tuple(conjunctions)


def produce_stats(settings: BroadcastSettings, rng: random.Random) -> SystemStats:
    return SystemStats(
        total_objects=TOTAL_OBJECTS_BASELINE + rng.randrange(-TOTAL_OBJECTS_JITTER, TOTAL_OBJECTS_JITTER),
        active_alerts=ACTIVE_ALERTS_BASELINE + rng.randrange(10),
        upcoming_conjunctions=UPCOMING_CONJUNCTIONS_BASELINE + rng.randrange(20),
        high_risk_objects=HIGH_RISK_OBJECTS_BASELINE + rng.randrange(8),
        system_health="warning" if rng.random() > 0.9 else "healthy",
        data_latency_ms=rng.randrange(50, 550),
        last_update=utc_now(),
    )


PRODUCERS: dict[Channel, Producer] = {
    Channel.OBJECTS: produce_objects,
    Channel.ALERTS: produce_alerts,
    Channel.CONJUNCTIONS: produce_conjunctions,
    Channel.STATS: produce_stats,
}


__all__ = [
    "Producer",
    "PRODUCERS",
    "CATALOGUE",
    "priority_for_risk",
    "produce_objects",
    "produce_alerts",
    "produce_conjunctions",
    "produce_stats",
]
