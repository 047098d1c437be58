"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    port: int = 5000
    frontend_url: str = "http://localhost:3000"
    stripe_secret_key: str
    stripe_webhook_secret: str
    supabase_url: str
    supabase_service_key: str
    checkout_currency: str = "usd"
    cors_origins: str = "*"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_cors_origins(raw: str | None) -> list[str]:
    """Parse allowed CORS origins from a comma-separated env value."""
    if raw is None:
        return ["*"]
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return ["*"]
    origins = [chunk.strip().rstrip("/") for chunk in cleaned.split(",")]
    return [origin for origin in origins if origin] or ["*"]
