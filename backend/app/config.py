from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Hours Bank"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://hours_bank:hours_bank@db:5432/hours_bank"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Outbound HTTP calls (report generation, commit history).
    upstream_timeout_seconds: float = 30.0

    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    github_api_url: str = "https://api.github.com"
    github_token: str | None = None
    github_repo: str | None = None
    github_branch: str | None = None
    github_projects: str | None = None  # JSON list of {id, name, repo, token, branch}


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
