"""Application configuration and settings management."""

from pathlib import Path
from typing import Annotated, Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Field Sales Booking API"
    api_prefix: str = "/api"
    log_level: str = "INFO"
    data_root: Path = Field(default=Path("data"), description="Root directory for static data files.")
    reps_file: Path = Field(
        default=Path("data/reps.json"),
        description="Representative roster with home addresses.",
    )
    availability_file: Path = Field(
        default=Path("data/availability.json"),
        description="Weekly recurring time-slot templates keyed by representative id.",
    )
    appointments_file: Path = Field(
        default=Path("data/appointments.json"),
        description="Appointment store used when no database is configured.",
    )
    serviceable_zips_file: Path = Field(
        default=Path("data/serviceable-zips.json"),
        description="Base serviceable zip registry.",
    )
    zip_overrides_file: Path = Field(
        default=Path("data/serviceable-zips.overrides.json"),
        description="Exclusion/notes overrides applied on top of the base registry.",
    )
    drive_policy: Literal["standard", "legacy"] = Field(
        default="standard",
        description="standard = 60 mi with prior-or-next anchor, legacy = 45 mi with prior-only anchor.",
    )
    drive_radius_miles: Optional[float] = Field(
        default=None,
        gt=0,
        description="Overrides the radius of the selected drive policy.",
    )
    grid_days: int = Field(default=5, ge=1, le=14)
    grid_max_workers: int = Field(default=1, ge=1)
    zip_cache_ttl_seconds: float = Field(default=300.0, ge=0.0)
    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator(
        "data_root",
        "reps_file",
        "availability_file",
        "appointments_file",
        "serviceable_zips_file",
        "zip_overrides_file",
        mode="before",
    )
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> str:
        return str(value or "INFO").strip().upper()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @property
    def database_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


settings = Settings()
