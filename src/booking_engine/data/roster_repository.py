"""Representative roster and weekly template loader with database-first approach, falling back to JSON files."""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from ..config import settings
from ..db.supabase import get_supabase_client
from ..errors import InvalidInput, StoreUnavailable
from ..models.domain import Representative, WeeklyTemplate
from .records import address_from_record, template_from_record

logger = logging.getLogger(__name__)


def _read_json_file(path: Path, label: str) -> Any:
    if not path.exists():
        raise StoreUnavailable(f"{label} file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        raise StoreUnavailable(f"{label} file '{path}' is not valid JSON: {exc}") from exc


def _build_rep(row: Mapping[str, Any], template: WeeklyTemplate) -> Optional[Representative]:
    rep_id = str(row.get("id") or "").strip()
    if not rep_id:
        logger.warning("Skipping roster row without an id")
        return None
    try:
        home = address_from_record(row.get("startingAddress") or {})
    except InvalidInput as exc:
        logger.warning(f"Skipping rep {rep_id}: {exc}")
        return None
    if not home.location.is_valid:
        # Never geocode a missing home base; the rep is unusable until fixed.
        logger.warning(f"Skipping rep {rep_id}: invalid home location ({home.location.lat}, {home.location.lng})")
        return None
    return Representative(
        id=rep_id,
        name=str(row.get("name") or rep_id).strip(),
        home_address=home,
        weekly_template=template,
        email=(str(row.get("email") or "").strip() or None),
        phone=(str(row.get("phone") or "").strip() or None),
        color=(str(row.get("color") or "").strip() or None),
    )


def build_roster(rep_rows: Iterable[Mapping[str, Any]], templates: Mapping[str, Any]) -> tuple[Representative, ...]:
    """Combine roster rows with weekly templates, preserving roster order."""

    reps: list[Representative] = []
    seen: set[str] = set()
    for row in rep_rows:
        rep_id = str(row.get("id") or "").strip()
        if rep_id in seen:
            logger.warning(f"Duplicate rep id {rep_id} in roster, keeping the first entry")
            continue
        raw_template = templates.get(rep_id)
        if raw_template is None:
            logger.warning(f"Rep {rep_id} has no weekly template; treating as unavailable")
        rep = _build_rep(row, template_from_record(raw_template))
        if rep is not None:
            reps.append(rep)
            seen.add(rep.id)
    return tuple(reps)


def _load_roster_from_database() -> tuple[Representative, ...] | None:
    """Load reps from Supabase. Returns None if the database is not available or empty."""
    supabase = get_supabase_client()
    if not supabase:
        return None

    try:
        rep_response = supabase.table("reps").select("*").order("created_at").execute()
        if not rep_response.data:
            return None
        slot_response = supabase.table("rep_availability").select("rep_id,day,time_slot").execute()
    except Exception as exc:
        logger.warning(f"Roster query failed, falling back to file: {exc}")
        return None

    templates: dict[str, dict[str, list[str]]] = {}
    for row in slot_response.data or []:
        templates.setdefault(str(row["rep_id"]), {}).setdefault(row["day"], []).append(row["time_slot"])

    rep_rows = [
        {
            "id": row.get("id"),
            "name": row.get("name"),
            "email": row.get("email"),
            "phone": row.get("phone"),
            "color": row.get("color"),
            "startingAddress": {
                "street": row.get("street"),
                "city": row.get("city"),
                "state": row.get("state"),
                "zip": row.get("zip"),
                "lat": row.get("lat"),
                "lng": row.get("lng"),
            },
        }
        for row in rep_response.data
    ]
    return build_roster(rep_rows, templates) or None


def _load_roster_from_files(
    reps_source: Path | None = None,
    availability_source: Path | None = None,
) -> tuple[Representative, ...]:
    rep_rows = _read_json_file(reps_source or settings.reps_file, "Roster")
    if not isinstance(rep_rows, list):
        raise StoreUnavailable("Roster file must contain a JSON array of representatives.")
    templates = _read_json_file(availability_source or settings.availability_file, "Availability")
    if not isinstance(templates, dict):
        raise StoreUnavailable("Availability file must contain a JSON object keyed by rep id.")
    return build_roster(rep_rows, templates)


@functools.lru_cache(maxsize=1)
def load_roster(
    reps_source: Path | None = None,
    availability_source: Path | None = None,
) -> tuple[Representative, ...]:
    """Get representatives from the database first, falling back to the JSON files."""
    db_roster = _load_roster_from_database()
    if db_roster:
        return db_roster
    return _load_roster_from_files(reps_source, availability_source)


def clear_roster_cache() -> None:
    """Clear the roster cache. Call this after schedules or the roster change."""
    load_roster.cache_clear()
