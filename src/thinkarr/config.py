"""Application configuration using Pydantic Settings.

Process-level settings live here (database, secrets, auth mode, limits).
Service URLs, API keys and LLM endpoints are user-managed and live in the
``app_config`` table instead (see ``ConfigStore``).
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./thinkarr.db"
INSECURE_APP_SECRETS = {
    "GENERATE_A_SECURE_KEY_HERE",
    "change-me-to-a-32-char-secret-key",
    "change-this-to-a-random-secret-key",
}
SECRET_FILE_ENV_VARS = (
    "APP_SECRET_KEY",
    "DATABASE_URL",
)


def _load_secret_file_env_vars() -> None:
    """Allow secrets to be sourced from *_FILE env vars (Docker secrets)."""
    for env_var in SECRET_FILE_ENV_VARS:
        file_var = f"{env_var}_FILE"
        file_path = os.getenv(file_var)
        if not file_path:
            continue
        try:
            value = Path(file_path).read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise RuntimeError(f"Failed to read {file_var} at {file_path}") from exc
        if not value:
            raise ValueError(f"{file_var} is empty")
        os.environ[env_var] = value


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ----- Application -----
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_secret_key: str = Field(
        ...,  # Required - encrypts stored API keys
        description="Secret key used to encrypt stored credentials",
    )

    # ----- Database -----
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False

    # ----- Auth -----
    auth_provider: Literal["session", "dev"] = "session"  # Use "dev" for local testing
    session_cookie_name: str = "thinkarr_session"

    # ----- Downstream media services -----
    service_timeout_seconds: float = 15.0

    # ----- LLM -----
    title_max_tokens: int = 20

    # ----- Rate limiting -----
    rate_limit_chat: str = "20/minute"
    rate_limit_storage_uri: str = "memory://"

    # ----- CORS -----
    # Can be set as JSON list or comma-separated string
    cors_origins_str: str = Field(default="http://localhost:3000", alias="cors_origins")

    @property
    def cors_origins(self) -> list[str]:
        """Parse cors_origins from comma-separated string or JSON list."""
        v = self.cors_origins_str
        if not v:
            return ["http://localhost:3000"]
        if v.startswith("["):
            import json

            raw = json.loads(v)
            if not isinstance(raw, list) or not all(isinstance(origin, str) for origin in raw):
                raise ValueError("CORS_ORIGINS must be a JSON list of strings")
            return raw
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Ensure secure settings in production environment."""
        if self.is_production:
            if self.app_debug:
                raise ValueError("APP_DEBUG must be false in production!")
            if len(self.app_secret_key) < 32 or self.app_secret_key in INSECURE_APP_SECRETS:
                raise ValueError(
                    "APP_SECRET_KEY must be at least 32 characters and not a placeholder!"
                )
            if self.auth_provider == "dev":
                raise ValueError(
                    "AUTH_PROVIDER=dev is not allowed in production! Use AUTH_PROVIDER=session."
                )
            if any(origin == "*" for origin in self.cors_origins):
                raise ValueError("CORS_ORIGINS must be restricted in production!")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    _load_secret_file_env_vars()
    return Settings()
