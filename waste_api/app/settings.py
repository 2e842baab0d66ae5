from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from waste_detection.app.config.settings import AppSettings, load_settings


class ApiSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WASTE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_upload_bytes: int = Field(default=10 * 1024 * 1024, ge=1)
    preload_detector: bool = False
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    session_header: str = "X-Session-Id"
    default_session: str = "default"
    session_idle_ttl: float = Field(default=600.0, gt=0)
    max_sessions: int = Field(default=1000, ge=1)


def get_settings() -> ApiSettings:
    return ApiSettings()


def get_detection_settings() -> AppSettings:
    return load_settings()
