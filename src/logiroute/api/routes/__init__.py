"""Route group exports."""

from . import advisor, health, network, routes

__all__ = ["advisor", "health", "network", "routes"]
