"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables (and .env)
- Centralizes bot, NUFI and ledger settings
- Validates required configuration on startup
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import List, Optional, Literal

from app.core.exceptions import ConfigurationError


NUFI_HISTORIAL_URL = "https://nufi.azure-api.net/numero_seguridad_social/v2/consultar_historial"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Required values are checked by validate_settings() at startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Telegram
    BOT_TOKEN: Optional[str] = Field(
        default=None,
        description="Telegram bot token from BotFather"
    )
    ADMIN_ID: str = Field(
        default="",
        description="Chat ID of the administrator (never charged)"
    )
    ALLOWED_IDS: str = Field(
        default="",
        description="Comma-separated chat IDs authorized on first start"
    )

    # NUFI
    NUFI_API_KEY: Optional[str] = Field(
        default=None,
        description="NUFI API key sent in the NUFI-API-KEY header"
    )
    NUFI_API_URL: str = Field(
        default=NUFI_HISTORIAL_URL,
        description="NUFI consultar_historial endpoint"
    )
    NUFI_TIMEOUT: float = Field(
        default=30.0,
        description="NUFI request timeout in seconds"
    )

    # Webhook (NUFI -> this server)
    PUBLIC_BASE_URL: str = Field(
        default="",
        description="Externally reachable base URL of this deployment"
    )
    WEBHOOK_SECRET: str = Field(
        default="webhook_secret",
        description="Secret path segment of the callback URL"
    )

    # Credits / ledger
    COST_PER_HISTORIAL: int = Field(
        default=1,
        description="Credits charged per /historial lookup"
    )
    DATA_FILE: str = Field(
        default="./data.json",
        description="Path of the JSON ledger file"
    )

    # Pending requests
    PENDING_TTL_MINUTES: int = Field(
        default=60,
        description="Minutes to wait for a NUFI callback before giving up"
    )
    PENDING_SWEEP_SECONDS: int = Field(
        default=60,
        description="Interval of the expired-request sweep"
    )

    # Application
    PORT: int = Field(
        default=3000,
        description="HTTP listen port"
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @validator("PUBLIC_BASE_URL")
    def strip_trailing_slash(cls, v):
        """The callback URL is built by appending to this value."""
        return v.rstrip("/")

    @validator("COST_PER_HISTORIAL")
    def validate_cost(cls, v):
        if v < 0:
            raise ValueError("COST_PER_HISTORIAL must not be negative")
        return v

    @property
    def allowed_ids(self) -> List[str]:
        """ALLOWED_IDS split into a list, blanks removed."""
        return [part.strip() for part in self.ALLOWED_IDS.split(",") if part.strip()]

    @property
    def default_chat_id(self) -> str:
        """Recipient of callbacks that cannot be correlated."""
        ids = self.allowed_ids
        return ids[0] if ids else self.ADMIN_ID

    @property
    def public_webhook_url(self) -> str:
        """URL NUFI posts results to."""
        return f"{self.PUBLIC_BASE_URL}/webhook/{self.WEBHOOK_SECRET}"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def validate_settings(config: Optional[Settings] = None):
    """
    Validates critical settings on application startup.
    Raises ConfigurationError listing every missing setting.
    """
    config = config or settings
    errors = []

    if not config.BOT_TOKEN:
        errors.append("BOT_TOKEN is required")
    if not config.NUFI_API_KEY:
        errors.append("NUFI_API_KEY is required")
    if not config.PUBLIC_BASE_URL:
        errors.append("PUBLIC_BASE_URL is required")
    if not config.allowed_ids:
        errors.append("ALLOWED_IDS needs at least one chat id")
    if not config.ADMIN_ID:
        errors.append("ADMIN_ID is required")

    if errors:
        raise ConfigurationError(
            f"Configuration validation failed: {', '.join(errors)}",
            details=errors
        )

    return True
