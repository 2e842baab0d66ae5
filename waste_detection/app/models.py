"""Shared data models for waste detection."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

BIODEGRADABLE = "biodegradable"
NON_BIODEGRADABLE = "non-biodegradable"


@dataclass(frozen=True)
class CornerBox:
    """Detector box in xyxy pixel coordinates."""

    xmin: float
    ymin: float
    xmax: float
    ymax: float


@dataclass(frozen=True)
class Box:
    """Pixel-space rectangle anchored at its top-left corner.

    Values are not clamped to the image; degenerate detector boxes can yield
    negative width or height.
    """

    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class RawDetection:
    """Represents a single object reported by a detector backend."""

    label: str
    score: float
    box: CornerBox


@dataclass(frozen=True)
class ClassifiedDetection:
    """A detection carrying its biodegradability verdict."""

    label: str
    confidence: float
    box: Box
    is_biodegradable: bool

    @property
    def category(self) -> str:
        return BIODEGRADABLE if self.is_biodegradable else NON_BIODEGRADABLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "confidence": self.confidence,
            "box": self.box.to_dict(),
            "is_biodegradable": self.is_biodegradable,
            "category": self.category,
        }
