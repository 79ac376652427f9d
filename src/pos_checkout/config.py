from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # None runs the till offline: no change service, sales kept in memory
    backend_url: str | None = None
    request_timeout_seconds: float = Field(default=5.0, gt=0)
    currency: str = "LKR"
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_prefix="POS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


def load_settings() -> Settings:
    return Settings()
