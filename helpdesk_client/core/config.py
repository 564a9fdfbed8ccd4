"""Client configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    APP_NAME: str = "KAM Ticket"
    ENV: str = "development"

    # helpdesk API, every endpoint lives under {API_URL}/api
    API_URL: str = "http://localhost:8081"
    HTTP_TIMEOUT_SECONDS: float = 25.0
    HTTP_MAX_RETRIES: int = 3
    HTTP_RETRY_BACKOFF_SECONDS: float = 0.5

    AUTH_COOKIE_NAME: str = "token"
    LOCAL_STORAGE_PATH: str = "~/.kam-helpdesk/storage.json"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("HTTP_MAX_RETRIES")
    @classmethod
    def validate_retries(cls, value: int) -> int:
        if value < 1:
            raise ValueError("HTTP_MAX_RETRIES must be at least 1")
        return value

    @property
    def api_base_url(self) -> str:
        return self.API_URL.strip().rstrip("/")

    @property
    def storage_path(self) -> Path:
        return Path(self.LOCAL_STORAGE_PATH).expanduser()


settings = Settings()
