from functools import lru_cache
from typing import List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    PROJECT_NAME: str = "SentryDash Occupancy API"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"

    # Room and roster persistence
    STORE_BACKEND: Literal["sql", "memory"] = "sql"
    DATABASE_URL: str = "sqlite:///./sentrydash.db"
    STORE_TIMEOUT_SECONDS: float = 5.0

    # Compare-and-swap retry policy for read-modify-write on rooms
    CAS_MAX_ATTEMPTS: int = 5
    CAS_INITIAL_DELAY_SECONDS: float = 0.02
    CAS_BACKOFF: float = 2.0

    # Redis configuration (empty string keeps the cache in process memory)
    REDIS_CACHE_URL: str = "redis://localhost:6379/1"
    ROSTER_CACHE_TTL_SECONDS: int = 300
    CACHE_TIMEOUT_SECONDS: float = 1.0

    RATE_LIMIT_STORAGE_URI: str = "memory://"
    ENTRY_RATE_LIMIT: str = "600/minute"

    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: List[str] | str) -> List[str]:
        """Allow both comma-separated strings and list inputs."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("CAS_MAX_ATTEMPTS")
    @classmethod
    def at_least_one_attempt(cls, value: int) -> int:
        if value < 1:
            raise ValueError("CAS_MAX_ATTEMPTS must be at least 1")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
