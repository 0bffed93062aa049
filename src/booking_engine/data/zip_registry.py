"""Serviceable zip registry backed by a base JSON list plus an overrides file."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Protocol

from ..config import settings
from ..errors import StoreUnavailable
from ..persistence.filesystem import FileStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServiceableZip:
    zip: str
    city: Optional[str] = None
    state: Optional[str] = None
    excluded: bool = False
    notes: Optional[str] = None


class ZipRegistry(Protocol):
    def load(self) -> Mapping[str, ServiceableZip]:
        """Return every registered zip keyed by its 5-digit code."""
        ...


def _zip_from_record(row: Mapping[str, Any]) -> Optional[ServiceableZip]:
    code = str(row.get("zip") or "").strip()[:5]
    if len(code) != 5 or not code.isdigit():
        return None
    notes = str(row.get("notes") or "").strip() or None
    return ServiceableZip(
        zip=code,
        city=(str(row.get("city") or "").strip() or None),
        state=(str(row.get("state") or "").strip() or None),
        excluded=bool(row.get("excluded", False)),
        notes=notes,
    )


def merge_overrides(
    base: Iterable[ServiceableZip],
    overrides: Iterable[Mapping[str, Any]],
) -> dict[str, ServiceableZip]:
    """Apply exclusion/notes overrides on top of the base registry.

    Overrides only change ``excluded`` and ``notes``; zips absent from the base
    list are ignored.
    """

    merged = {entry.zip: entry for entry in base}
    for row in overrides:
        code = str(row.get("zip") or "").strip()[:5]
        current = merged.get(code)
        if current is None:
            logger.debug(f"Ignoring override for unregistered zip {code}")
            continue
        merged[code] = ServiceableZip(
            zip=current.zip,
            city=current.city,
            state=current.state,
            excluded=bool(row.get("excluded", current.excluded)),
            notes=(str(row.get("notes") or "").strip() or None) if "notes" in row else current.notes,
        )
    return merged


class FileZipRegistry:
    """Registry read from ``serviceable_zips_file`` merged with ``zip_overrides_file``."""

    def __init__(
        self,
        storage: FileStorage | None = None,
        base_file: Path | None = None,
        overrides_file: Path | None = None,
    ) -> None:
        self.storage = storage or FileStorage()
        self.base_file = base_file or settings.serviceable_zips_file
        self.overrides_file = overrides_file or settings.zip_overrides_file

    def load(self) -> dict[str, ServiceableZip]:
        rows = self.storage.read_json(self.base_file)
        if rows is None:
            raise StoreUnavailable(f"Serviceable zip registry not found: {self.storage.resolve(self.base_file)}")
        if not isinstance(rows, list):
            raise StoreUnavailable("Serviceable zip registry must be a JSON array.")
        base = [entry for entry in (_zip_from_record(row) for row in rows) if entry is not None]
        overrides = self.storage.read_json(self.overrides_file, default=[]) or []
        merged = merge_overrides(base, overrides)
        logger.info(f"Loaded {len(merged)} serviceable zips ({len(overrides)} overrides)")
        return merged

    def save_overrides(self, overrides: Iterable[Mapping[str, Any]]) -> None:
        payload = [
            {"zip": str(row["zip"]).strip()[:5], "excluded": bool(row.get("excluded", False)), "notes": row.get("notes")}
            for row in overrides
        ]
        self.storage.write_json(self.overrides_file, payload)
