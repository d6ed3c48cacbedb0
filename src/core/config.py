"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Enigma Notifier")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/enigma",
        description="PostgreSQL connection URL with asyncpg driver",
    )

    # Orchestrator
    orchestrator_enabled: bool = Field(
        default=True,
        description="Start the notification orchestrator with the application",
    )
    restaurant_timezone: str = Field(
        default="Europe/Madrid",
        description="Zone for calendar days and reservation wall-clock times",
    )
    notification_poll_interval_seconds: float = Field(default=30, gt=0)
    notification_feed_limit: int = Field(default=100, ge=1, le=500)
    temporal_check_interval_seconds: float = Field(default=60, gt=0)
    temporal_check_startup_delay_seconds: float = Field(default=5, ge=0)
    upcoming_reservation_window_minutes: int = Field(default=15, ge=1)
    upcoming_reservation_early_window_minutes: int = Field(
        default=120,
        ge=0,
        description="Early reminder window; 0 disables the early reminder",
    )
    upcoming_reservation_max_results: int = Field(default=50, ge=1)
    table_service_minutes: int = Field(default=120, ge=1)
    table_time_warning_percent: int = Field(default=75, ge=1, le=99)
    notification_dedup_window_seconds: int | None = Field(
        default=None,
        ge=1,
        description="Rolling dedup window; unset means same calendar day",
    )
    notification_maintenance_interval_seconds: float = Field(default=3600, gt=0)
    notification_expiry_days: int = Field(
        default=90,
        description="Age after which notifications without expires_at are purged",
    )

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Render and other providers supply a standard ``postgresql://`` URL.
        SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
