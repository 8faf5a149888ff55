"""Configuration settings for the MicroGuide curriculum service."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MG_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Application
    app_name: str = "MicroGuide Curriculum Service"
    debug: bool = False
    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Database
    # Default to Postgres; tests may override via MG_DB_URL
    db_url: str = "postgresql+asyncpg://localhost/microguide"
    db_pool_size: int = 10
    db_max_overflow: int = 20

    # Query cache
    cache_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl_seconds: float = 300.0
    cache_sweep_interval_seconds: float = 0.0  # 0 disables the sweep task

    # Consistency heuristics for the backing store
    settle_delay_seconds: float = 1.0
    verify_delay_seconds: float = 1.0

    # Search
    search_result_limit: int = 20
    suggestion_limit: int = 6
    popular_topic_limit: int = 5

    # Text-completion collaborator (OpenAI-compatible)
    completion_base: str = "https://api.openai.com/v1"
    completion_api_key: Optional[str] = None
    completion_model: str = "gpt-4"
    completion_search_model: str = "gpt-3.5-turbo"
    completion_timeout: float = 30.0
    use_completion_for_generation: bool = False

    # Auth
    jwt_issuer: str = "auth.microguide.app"
    jwt_audience: str = "microguide"
    jwt_algorithm: str = "RS256"
    jwt_public_key: Optional[str] = None

    # CORS
    cors_origins: list[str] = [
        "https://microguide.app",
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Rate Limiting
    rate_limit_requests: int = 60
    rate_limit_window: int = 60  # seconds


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
