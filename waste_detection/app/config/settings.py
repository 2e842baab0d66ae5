"""Configuration utilities for waste detection."""
from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application configuration sourced from environment variables or defaults."""

    model_config = SettingsConfigDict(env_prefix="WASTE_", case_sensitive=False, protected_namespaces=())

    detector_backend: Literal["yolo", "remote"] = Field(default="yolo", description="Detector implementation to load.")
    model_path: Path = Field(default=Path("models/yolov8m.pt"), description="YOLO weights path")
    confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    iou_threshold: float = Field(default=0.45, ge=0.0, le=1.0)
    device: str = Field(default="cpu", description="Inference device passed to the local runtime.")
    remote_endpoint: Optional[str] = Field(default=None, description="Object-detection inference endpoint.")
    remote_token: Optional[str] = Field(default=None, description="Bearer token for the remote endpoint.")
    remote_timeout: float = Field(default=30.0, gt=0.0)
    overlay_font_scale: float = Field(default=0.5, gt=0.0)
    box_thickness: int = Field(default=3, ge=1)
    output_dir: Path = Field(
        default=Path(__file__).resolve().parents[2] / "output",
        description="Directory for the annotated image and JSON report.",
    )
    log_format: Literal["text", "json"] = Field(default="text")

    @field_validator("model_path", "output_dir", mode="before")
    @classmethod
    def _expand_path(cls, value: str | Path) -> Path:
        return Path(value).expanduser()


def load_settings(**overrides: object) -> AppSettings:
    """Return application settings, applying optional overrides."""

    return AppSettings(**overrides)
