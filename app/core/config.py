from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "postgresql://postgres:postgres@db:5432/userroles"
    SQL_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    # Event store
    # Default retry cutoff for scans and for marking records as exhausted.
    # Keep this stable across consumer deployments: raising it re-exposes
    # records that were already exhausted under the old value.
    EVENT_MAX_ATTEMPTS: int = 3
    EVENT_BATCH_SIZE: int = 10
    EVENT_CLAIM_TIMEOUT_SECONDS: int = 300
    # When True, a business write and its event share one transaction and a
    # failed append fails the request. When False the event is best-effort.
    EVENT_APPEND_REQUIRED: bool = True

    @field_validator("EVENT_MAX_ATTEMPTS", "EVENT_BATCH_SIZE", "EVENT_CLAIM_TIMEOUT_SECONDS")
    @classmethod
    def _must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        # Pydantic will read from environment variables first,
        # then fall back to .env file if not found in environment


settings = Settings()
