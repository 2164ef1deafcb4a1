"""Deterministic delivery-time estimates used when the advisor is silent."""

from __future__ import annotations

from dataclasses import dataclass

from ...config import settings


@dataclass(frozen=True, slots=True)
class DeliveryEstimate:
    simple_hours: float
    predicted_hours: float


def estimate_delivery_time(
    distance: float,
    stops: int,
    traffic_score: float = 0.0,
    *,
    average_speed_kmh: float | None = None,
    stop_service_minutes: float | None = None,
) -> DeliveryEstimate:
    """Distance over average speed, plus dwell time per stop and a traffic surcharge."""
    if not 0.0 <= traffic_score <= 100.0:
        raise ValueError("traffic_score must be within [0, 100]")
    speed = average_speed_kmh or settings.average_speed_kmh
    dwell = settings.stop_service_minutes if stop_service_minutes is None else stop_service_minutes

    simple = distance / speed
    predicted = simple + stops * dwell / 60.0 + (traffic_score / 100.0) * simple
    return DeliveryEstimate(simple_hours=round(simple, 3), predicted_hours=round(predicted, 3))
