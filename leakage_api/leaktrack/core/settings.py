from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the FastAPI service.

    This is separate from leaktrack.db.config.Settings, which focuses on the database layer.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="Leakage Tracking API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Backend API for machine leakage inspections and repairs. "
            "Testers report leakages by chassis number, repairmen resolve them, "
            "admins follow aggregate status."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    # Startup behavior
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="If true, run Alembic migrations (upgrade head) at app startup.",
    )
    AUTO_SEED: bool = Field(
        default=False,
        description="If true, seed reference catalog data after migrations.",
    )

    # Tokens
    JWT_SECRET_KEY: str = Field(default="change-me", description="HMAC key for signing JWTs")
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60)
    REFRESH_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 7)

    # Report aggregation
    DELAY_THRESHOLD_HOURS: int = Field(
        default=48,
        ge=1,
        description="Pending inspections older than this are reported as delayed.",
    )
    LEAKAGE_FREE_WEEK_DAYS: int = Field(default=7, ge=1)
    LEAKAGE_FREE_MONTH_DAYS: int = Field(default=30, ge=1)
    TOP_LEAKAGES_LIMIT: int = Field(default=10, ge=1)
    REPORT_TIMEZONE: str = Field(
        default="UTC", description="IANA timezone used to find the start of 'today'."
    )
    DASHBOARD_RECENT_LIMIT: int = Field(default=20, ge=1, le=500)
    OVERVIEW_RECENT_LIMIT: int = Field(default=10, ge=1, le=500)

    # Repair photos
    PHOTO_STORAGE_DIR: str = Field(
        default="storage/repair-photos",
        description="Directory where uploaded repair photos are written.",
    )
    PHOTO_PUBLIC_BASE_URL: str = Field(
        default="/photos",
        description="Prefix of the photo URLs handed to clients; a path or an absolute CDN URL.",
    )
    PHOTO_MOUNT_PATH: str = Field(
        default="/photos",
        description="Path where this service serves PHOTO_STORAGE_DIR itself.",
    )

    # Seeding
    SEED_ADMIN_EMAIL: str = Field(default="admin@leaktrack.example.com")
    SEED_ADMIN_PASSWORD: str = Field(default="change-me-now", description="Password for the seeded admin profile")

    # Environment label
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """
        Accept both JSON array format and comma-separated formats for CORS origins.
        """
        if v is None:
            return ["*"]
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return parts or ["*"]
        if isinstance(v, list):
            return v or ["*"]
        return ["*"]

    @field_validator("PHOTO_MOUNT_PATH")
    @classmethod
    def _mount_path_is_path(cls, v: str) -> str:
        path = v.rstrip("/")
        if not path.startswith("/") or "//" in path:
            raise ValueError("PHOTO_MOUNT_PATH must be an absolute path such as /photos")
        return path

    @model_validator(mode="after")
    def _leakage_free_windows_nested(self) -> "AppSettings":
        if self.LEAKAGE_FREE_WEEK_DAYS > self.LEAKAGE_FREE_MONTH_DAYS:
            raise ValueError("LEAKAGE_FREE_WEEK_DAYS must not exceed LEAKAGE_FREE_MONTH_DAYS")
        return self


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """
    Return a new AppSettings instance populated from environment variables.

    Note:
      A new instance is built on each call so tests can change the environment.
    """
    return AppSettings()
