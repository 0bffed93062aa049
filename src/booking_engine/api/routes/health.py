"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/data", status_code=status.HTTP_200_OK)
def health_data() -> dict:
    """Check that the roster and zip registry can be loaded."""
    from ...data.roster_repository import load_roster
    from ...services.serviceability.gate import get_serviceability_gate

    report: dict = {}
    try:
        reps = load_roster()
        report["roster"] = {"healthy": True, "reps": len(reps)}
    except Exception as exc:
        report["roster"] = {"healthy": False, "error": str(exc)}

    try:
        gate = get_serviceability_gate()
        gate.check_serviceable("00000")
        report["zip_registry"] = {"healthy": True, "cached": gate.cache.is_warm}
    except Exception as exc:
        report["zip_registry"] = {"healthy": False, "error": str(exc)}

    report["healthy"] = all(part["healthy"] for part in report.values())
    return report


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and appointment table status."""
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set BOOKING_SUPABASE_URL and BOOKING_SUPABASE_KEY; using file stores.",
        }

    try:
        supabase.table("appointments").select("id", count="exact").limit(1).execute()
        return {"configured": True, "connected": True, "message": "Database connected."}
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
