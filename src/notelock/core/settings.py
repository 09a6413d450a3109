"""Application settings and configuration.

This module defines all configuration options for the Notelock service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    Durations follow the units operators are used to: note lifetime in
    hours, sweep and dump intervals in minutes, limiter windows in seconds.
    """

    # Application metadata
    app_name: str = Field(default="Notelock", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Note expiration
    note_life_hours: int = Field(default=24, ge=1, alias="NOTE_LIFE_HOURS")
    expire_interval_minutes: float = Field(default=5, ge=0, alias="EXPIRE_INTERVAL_MINUTES")

    # Debug: periodically log live note ids and ages (0 disables)
    dump_interval_minutes: float = Field(default=0, ge=0, alias="DUMP_INTERVAL_MINUTES")

    # API encryption only (web encryption page disabled)
    api_only: bool = Field(default=False, alias="API_ONLY")
    public_base_url: str | None = Field(default=None, alias="PUBLIC_BASE_URL")
    trust_forwarded_for: bool = Field(default=False, alias="TRUST_FORWARDED_FOR")

    # Submission limits and identifier generation
    max_note_bytes: int = Field(default=1_048_576, ge=1, alias="MAX_NOTE_BYTES")
    id_max_attempts: int = Field(default=5, ge=1, alias="ID_MAX_ATTEMPTS")
    id_backoff_seconds: float = Field(default=0.001, ge=0, alias="ID_BACKOFF_SECONDS")

    # Global request limiter
    global_rate_window_seconds: float = Field(default=900, gt=0, alias="GLOBAL_RATE_WINDOW_SECONDS")
    global_rate_max: int = Field(default=300, ge=1, alias="GLOBAL_RATE_MAX")

    # Write-path limiter
    write_rate_window_seconds: float = Field(default=3600, gt=0, alias="WRITE_RATE_WINDOW_SECONDS")
    write_rate_max: int = Field(default=30, ge=1, alias="WRITE_RATE_MAX")

    # Progressive slowdown
    slowdown_window_seconds: float = Field(default=900, gt=0, alias="SLOWDOWN_WINDOW_SECONDS")
    slowdown_threshold: int = Field(default=100, ge=0, alias="SLOWDOWN_THRESHOLD")
    slowdown_delay_seconds: float = Field(default=0.5, ge=0, alias="SLOWDOWN_DELAY_SECONDS")
    slowdown_max_delay_seconds: float = Field(
        default=20.0,
        ge=0,
        alias="SLOWDOWN_MAX_DELAY_SECONDS",
    )
    limiter_prune_interval_seconds: float = Field(
        default=300,
        ge=0,
        alias="LIMITER_PRUNE_INTERVAL_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def note_ttl_seconds(self) -> float:
        """Return the note lifetime in seconds."""
        return float(self.note_life_hours * SECONDS_PER_HOUR)

    @property
    def expire_interval_seconds(self) -> float:
        """Return the sweep interval in seconds (0 when expiry is disabled)."""
        return float(self.expire_interval_minutes * SECONDS_PER_MINUTE)

    @property
    def dump_interval_seconds(self) -> float:
        """Return the debug dump interval in seconds (0 when disabled)."""
        return float(self.dump_interval_minutes * SECONDS_PER_MINUTE)


settings = Settings()
