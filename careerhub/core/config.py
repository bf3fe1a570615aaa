"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "careerhub_user"
    postgres_password: str = "password"
    postgres_db: str = "careerhub_db"

    # Full SQLAlchemy URL, overrides the postgres_* parts when set
    database_url: Optional[str] = None

    # MongoDB (AI output archive)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "careerhub_docs"

    # OpenAI Whisper (transcription)
    openai_api_key: str = ""
    whisper_model: str = "whisper-1"

    # Interview analysis LLM (OpenAI-compatible endpoint)
    llm_api_key: str = ""
    llm_base_url: str = "https://api.anthropic.com/v1/"
    llm_model: str = "claude-sonnet-4-20250514"
    llm_max_tokens: int = 1024

    # Daily.co video rooms
    daily_api_key: str = ""
    daily_api_url: str = "https://api.daily.co/v1"
    daily_room_expiry_minutes: int = 120

    # Supabase Storage (uploaded documents)
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_bucket: str = "documents"

    # Timeout applied to every outbound provider call
    provider_timeout_seconds: float = 60.0

    # Uploads
    max_upload_size_mb: int = 5

    # Reputation policy
    high_ghosting_threshold: int = 25

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # App
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    @property
    def sqlalchemy_url(self) -> str:
        """Construct the database URL, preferring an explicit DATABASE_URL."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
