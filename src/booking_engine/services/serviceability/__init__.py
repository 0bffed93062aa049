"""Serviceable-territory checks."""

from .cache import RegistryCache
from .gate import ServiceabilityGate, ServiceabilityResult, get_serviceability_gate, normalize_zip

__all__ = [
    "RegistryCache",
    "ServiceabilityGate",
    "ServiceabilityResult",
    "get_serviceability_gate",
    "normalize_zip",
]
