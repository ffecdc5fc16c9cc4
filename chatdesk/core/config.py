"""Application configuration."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CHATDESK_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Record store
    data_dir: Path = Path("data")
    strict_reads: bool = False

    # Upstream chat API (original variable names are still honoured)
    chat_api_url: str = Field(
        default="",
        validation_alias=AliasChoices("CHAT_API_URL", "CHATDESK_CHAT_API_URL"),
    )
    chat_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("CHAT_API_KEY", "CHATDESK_CHAT_API_KEY"),
    )
    chat_api_timeout: float = 60.0

    # CORS - stored as comma-separated string, parsed via property
    allowed_origins_str: str = "http://localhost:3000"

    @property
    def allowed_origins(self) -> list[str]:
        """Parse allowed_origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    # App settings
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def warn_missing_upstream(self) -> "Settings":
        """Warn when the chat proxy has nowhere to forward to."""
        if not self.chat_api_url:
            logger.warning(
                "CHAT_API_URL not set - /api/chat will answer 500 until it is configured"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
