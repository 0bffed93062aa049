"""Route group exports."""

from . import appointments, availability, health, serviceability

__all__ = ["availability", "appointments", "health", "serviceability"]
