"""Application configuration via Pydantic Settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global crawler settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # HTTP
    CRAWL_HTTP_TIMEOUT: float = 30.0  # seconds, per request

    # Retry budget per page fetch. 1 = fail fast, no retry.
    CRAWL_FETCH_ATTEMPTS: int = 1
    CRAWL_RETRY_MIN_WAIT: float = 2.0
    CRAWL_RETRY_MAX_WAIT: float = 30.0

    # Scales every source's configured inter-request delay
    CRAWL_DELAY_MULTIPLIER: float = 1.0

    @field_validator("CRAWL_FETCH_ATTEMPTS")
    @classmethod
    def check_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError("CRAWL_FETCH_ATTEMPTS must be at least 1")
        return value

    @field_validator("CRAWL_DELAY_MULTIPLIER")
    @classmethod
    def check_delay_multiplier(cls, value: float) -> float:
        if value < 0:
            raise ValueError("CRAWL_DELAY_MULTIPLIER must not be negative")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()


settings = Settings()
