"""Application configuration via Pydantic Settings."""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pricewatch.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Record store
    RECORD_STORE: Literal["supabase", "database"] = "supabase"

    # Supabase (PostgREST)
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    # SQL database, used when RECORD_STORE=database
    DATABASE_URL: str = "sqlite+aiosqlite:///./pricewatch.db"

    # Browser
    HEADLESS: bool = True
    NAVIGATION_TIMEOUT_MS: int = Field(45000, gt=0)

    # Scheduling
    BATCH_SIZE: int = Field(5, ge=1)
    BATCH_DELAY_MIN_SECONDS: float = Field(1.0, ge=0)
    BATCH_DELAY_MAX_SECONDS: float = Field(4.0, ge=0)

    # Structured data may be injected after the initial load
    STRUCTURED_DATA_ATTEMPTS: int = Field(3, ge=1)
    STRUCTURED_DATA_RETRY_SECONDS: float = Field(1.0, ge=0)

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    @model_validator(mode="after")
    def fix_database_url(self) -> "Settings":
        """Hosted Postgres URLs come as postgresql:// but asyncpg needs postgresql+asyncpg://"""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            self.DATABASE_URL = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            self.DATABASE_URL = url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self

    @model_validator(mode="after")
    def check_delay_range(self) -> "Settings":
        if self.BATCH_DELAY_MIN_SECONDS > self.BATCH_DELAY_MAX_SECONDS:
            raise ValueError("BATCH_DELAY_MIN_SECONDS must not exceed BATCH_DELAY_MAX_SECONDS")
        return self

    def validate_credentials(self) -> None:
        """Ensure the selected record store has what it needs to connect.

        Raises:
            ConfigurationError: If a required credential is missing
        """
        if self.RECORD_STORE == "supabase":
            missing = [
                name for name in ("SUPABASE_URL", "SUPABASE_KEY")
                if not getattr(self, name)
            ]
            if missing:
                raise ConfigurationError(
                    f"Missing environment variables: {', '.join(missing)}"
                )
        elif not self.DATABASE_URL:
            raise ConfigurationError("Missing environment variable: DATABASE_URL")


settings = Settings()
