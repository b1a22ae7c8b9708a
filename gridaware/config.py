"""
Grid Aware – Central Configuration
===================================
All application settings are loaded from environment variables (via .env).
Pydantic-Settings validates & types every value at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ── Package root ─────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent


# ─────────────────────────────────────────────────────────────────────────────
class AppSettings(BaseSettings):
    """Core application settings."""

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── App ──────────────────────────────────────────────────────────────────
    app_name: str = Field("Grid Aware", description="Human-readable application name")
    app_env: str = Field("development", description="Environment: development|staging|production")
    app_debug: bool = Field(False)
    app_host: str = Field("0.0.0.0")
    app_port: int = Field(8000, ge=1, le=65535)

    # ── Electricity Maps (upstream carbon-intensity API) ─────────────────────
    electricity_maps_base_url: str = Field("https://api.electricitymap.org/v3")
    electricity_maps_api_key: str = Field(
        "", description="Used only when the stored global options carry no api_key"
    )
    intensity_backend: str = Field(
        "carbon-intensity",
        description="carbon-intensity (numeric) | carbon-intensity-level (categorical)",
    )
    fallback_zone: str = Field("ES", description="Zone used for local/private visitor IPs")
    intensity_cache_ttl: int = Field(600, ge=0, description="Reading cache TTL in seconds")
    upstream_timeout_s: float = Field(10.0, gt=0)

    # ── Presentation ─────────────────────────────────────────────────────────
    image_medium_mode: str = Field("overlay", description="overlay | blur")
    video_medium_mode: str = Field("thumbnail", description="thumbnail | iframe")
    lite_youtube: bool = Field(True, description="Swap low-tier YouTube iframes for <lite-youtube>")

    # ── Database ─────────────────────────────────────────────────────────────
    database_url: str = Field(
        "sqlite+aiosqlite:///./data/gridaware.db",
        description="SQLAlchemy async database URL",
    )
    database_pool_size: int = Field(10, ge=1)
    database_max_overflow: int = Field(20, ge=0)

    # ── Logging ──────────────────────────────────────────────────────────────
    log_level: str = Field("INFO")
    log_file: str = Field("logs/gridaware.log")
    log_rotation: str = Field("10 MB")
    log_retention: str = Field("7 days")

    # ── CORS ─────────────────────────────────────────────────────────────────
    allowed_origins: str = Field(
        "http://localhost:3000,http://localhost:8000,http://127.0.0.1:8000",
        description="Comma-separated list of allowed CORS origins",
    )

    # ── Computed helpers ─────────────────────────────────────────────────────
    @property
    def cors_origins(self) -> list[str]:
        """Return CORS origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"log_level must be one of {valid}")
        return v.upper()

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        valid = {"development", "staging", "production"}
        if v.lower() not in valid:
            raise ValueError(f"app_env must be one of {valid}")
        return v.lower()

    @field_validator("intensity_backend")
    @classmethod
    def validate_intensity_backend(cls, v: str) -> str:
        valid = {"carbon-intensity", "carbon-intensity-level"}
        if v.lower() not in valid:
            raise ValueError(f"intensity_backend must be one of {valid}")
        return v.lower()

    @field_validator("image_medium_mode")
    @classmethod
    def validate_image_medium_mode(cls, v: str) -> str:
        valid = {"overlay", "blur"}
        if v.lower() not in valid:
            raise ValueError(f"image_medium_mode must be one of {valid}")
        return v.lower()

    @field_validator("video_medium_mode")
    @classmethod
    def validate_video_medium_mode(cls, v: str) -> str:
        valid = {"thumbnail", "iframe"}
        if v.lower() not in valid:
            raise ValueError(f"video_medium_mode must be one of {valid}")
        return v.lower()

    @field_validator("fallback_zone")
    @classmethod
    def validate_fallback_zone(cls, v: str) -> str:
        return v.strip().upper() or "ES"

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if v.startswith("sqlite") and "///./" in v:
            driver, rel_path = v.split("///./")
            abs_path = (BASE_DIR / rel_path).resolve()
            # Ensure the data directory exists
            abs_path.parent.mkdir(parents=True, exist_ok=True)
            return f"{driver}///{abs_path}"
        return v

    @field_validator("log_file", mode="before")
    @classmethod
    def validate_log_file(cls, v: str) -> str:
        if not Path(v).is_absolute():
            abs_path = (BASE_DIR / v).resolve()
            abs_path.parent.mkdir(parents=True, exist_ok=True)
            return str(abs_path)
        return v


# ── Singleton accessor (cached after first call) ──────────────────────────────
@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return the application settings singleton.  Import and call this everywhere."""
    return AppSettings()


# Convenience module-level alias so callers can do:  from gridaware.config import settings
settings: AppSettings = get_settings()
