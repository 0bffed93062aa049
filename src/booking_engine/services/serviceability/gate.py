"""Serviceability gate: decides whether the engine may run for an address."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

from ...config import settings
from ...data.zip_registry import FileZipRegistry, ServiceableZip, ZipRegistry
from ...errors import InvalidInput, NotServiceable, StoreUnavailable
from .cache import RegistryCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServiceabilityResult:
    zip: str
    serviceable: bool
    excluded: bool
    notes: Optional[str] = None


def normalize_zip(zip_code: str) -> str:
    """Return the 5-digit zip; ZIP+4 is accepted, shorter input is rejected."""

    digits = re.sub(r"\D", "", zip_code or "")
    if len(digits) < 5:
        raise InvalidInput(f"Invalid zip code '{zip_code}'.")
    return digits[:5]


class ServiceabilityGate:
    def __init__(self, registry: ZipRegistry, cache: RegistryCache[Mapping[str, ServiceableZip]]) -> None:
        self.registry = registry
        self.cache = cache

    def check_serviceable(self, zip_code: str) -> ServiceabilityResult:
        code = normalize_zip(zip_code)
        entry = self.cache.get(self.registry.load).get(code)
        if entry is None:
            return ServiceabilityResult(zip=code, serviceable=False, excluded=False)
        if entry.excluded:
            return ServiceabilityResult(zip=code, serviceable=False, excluded=True, notes=entry.notes)
        return ServiceabilityResult(zip=code, serviceable=True, excluded=False)

    def require_serviceable(self, zip_code: str) -> ServiceabilityResult:
        result = self.check_serviceable(zip_code)
        if not result.serviceable:
            logger.info(f"Zip {result.zip} not serviceable (excluded={result.excluded})")
            raise NotServiceable(result.zip, excluded=result.excluded, notes=result.notes)
        return result

    def invalidate(self) -> None:
        self.cache.invalidate()

    def save_overrides(self, overrides: list[dict]) -> None:
        """Persist exclusion/notes overrides and drop the cached registry."""
        save = getattr(self.registry, "save_overrides", None)
        if save is None:
            raise StoreUnavailable(f"{type(self.registry).__name__} is read-only and does not accept overrides.")
        save(overrides)
        self.invalidate()


@lru_cache()
def get_serviceability_gate() -> ServiceabilityGate:
    """Gate built from settings for the HTTP layer; library callers build their own."""
    return ServiceabilityGate(
        FileZipRegistry(),
        RegistryCache(ttl_seconds=settings.zip_cache_ttl_seconds),
    )
