from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
    ]

    cors_origin_regex: str | None = None
    trusted_hosts: list[str] = ["*"]
    root_path: str = ""

    # Supabase (required; the app refuses to start without them)
    supabase_url: str
    supabase_key: str
    memos_table: str = "memos"

    # OpenAI (checked when a summary is requested)
    openai_api_key: str | None = None
    summary_model: str = "gpt-4o-mini"
    summary_max_output_tokens: int = 500
    summary_temperature: float = 0.7


settings = Settings()
