"""
Application configuration using pydantic-settings.

Loads environment variables from .env file and provides typed access
to configuration values for both the proxy and the UI.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Completion service credential, only ever read by the proxy.
    # Optional so that a missing key surfaces as a request-time
    # configuration error instead of a startup crash.
    anthropic_api_key: Optional[str] = None

    # Claude configuration
    claude_model: str = "claude-sonnet-4-20250514"
    claude_max_tokens: int = 8192
    claude_temperature: float = 0.7
    structured_output: bool = True

    # Client / UI configuration
    api_base_url: str = "http://localhost:8000"
    request_timeout: float = 60.0
    storage_path: str = ".rental-finder.json"

    # Application settings
    debug: bool = False
    app_name: str = "Rental Finder API"
    app_version: str = "0.1.0"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    The instance is passed explicitly to whatever needs it (FastAPI
    dependencies, the UI), never stashed in module globals.
    """
    return Settings()
