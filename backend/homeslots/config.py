# backend/homeslots/config.py

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root

SQLITE_RELATIVE_PREFIX = "sqlite:///./"


class Settings(BaseSettings):
    """
    Process settings, read from the environment or `<repo>/.env`.

    DATABASE_URL and REDIS_URL are required; everything else has a default.
    """
    database_url: str
    redis_url: str

    # Seconds the scheduling configuration snapshot stays in Redis
    config_cache_ttl_seconds: int = 300
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def resolved_database_url(self) -> str:
        """DATABASE_URL with a relative SQLite path anchored at the repository root."""
        if not self.database_url.startswith(SQLITE_RELATIVE_PREFIX):
            return self.database_url
        db_path = BASE_DIR / self.database_url.removeprefix(SQLITE_RELATIVE_PREFIX)
        return f"sqlite:///{db_path}"


settings = Settings()
