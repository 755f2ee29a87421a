from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = "Syllabuild"
    environment: str = "development"  # development | production
    log_level: str = "INFO"
    port: int = 3001

    # LLM (OpenAI Responses API). Generation endpoints check the key before use.
    openai_api_key: str = ""
    openai_url: str = "https://api.openai.com/v1/responses"
    openai_model: str = "gpt-4.1"
    openai_vision_model: str = "gpt-4.1-mini"
    # None keeps the transport default (no local deadline)
    model_timeout_seconds: Optional[float] = None

    # Only consulted outside production
    cors_origin: str = "http://localhost:5173"  # comma-separated

    # Pre-built client bundle served in production
    frontend_dist: str = "frontend/dist"

    # Local course/user store used by the course-builder client
    state_file: str = ".syllabuild_state.json"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origins_list(self) -> list[str]:
        return _split_csv(self.cors_origin)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
