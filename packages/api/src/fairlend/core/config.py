"""
Application configuration.

All settings read from environment variables with sensible local dev defaults.
The LLM endpoint itself is described in config/models.yaml (see
``fairlend.inference.config``); everything else lives here.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve project root .env regardless of CWD (matches inference/config.py approach)
_PROJECT_ROOT = Path(__file__).resolve().parents[5]
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings -- single source of truth for env-driven config."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- App --
    APP_NAME: str = "fairlend"
    DEBUG: bool = False

    # -- CORS --
    ALLOWED_HOSTS: list[str] = ["http://localhost:5173"]

    # -- Auth --
    AUTH_DISABLED: bool = Field(
        default=False,
        description="Bypass JWT validation. Set True for tests and local dev without Keycloak.",
    )
    KEYCLOAK_URL: str = "http://localhost:8080"
    KEYCLOAK_REALM: str = "fairlend"
    JWKS_CACHE_TTL: int = Field(
        default=300,
        description="JWKS cache lifetime in seconds (default 5 minutes).",
    )

    # -- Decisions --
    APPROVED_LOAN_RATE: float = Field(
        default=0.05,
        description="Flat rate applied to approved loans when computing the monthly installment.",
    )
    NOTIFICATION_INTERVAL_DAYS: int = Field(
        default=30,
        description="Days from approval until the first scheduled loan notification.",
    )

    # -- Notifications --
    MONTHLY_REMINDER_MESSAGE: str = (
        "Your monthly loan update is ready. Your eligibility and insights have been refreshed."
    )


settings = Settings()
