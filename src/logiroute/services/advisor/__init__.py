"""Advisor services."""

from .client import AdvisorClient, check_health
from .estimates import DeliveryEstimate, estimate_delivery_time

__all__ = [
    "AdvisorClient",
    "check_health",
    "DeliveryEstimate",
    "estimate_delivery_time",
]
