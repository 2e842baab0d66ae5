"""Overlay classified detections onto a copy of the source image."""
from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from ..config.settings import AppSettings
from ..errors import RenderUnavailable
from ..models import ClassifiedDetection
from ..utils.geometry import box_corners
from .aggregator import percent

LOGGER = logging.getLogger(__name__)

Color = Tuple[int, int, int]

# BGR
BIODEGRADABLE_COLOR: Color = (94, 197, 34)
NON_BIODEGRADABLE_COLOR: Color = (68, 68, 239)
TEXT_COLOR: Color = (255, 255, 255)

TAG_HEIGHT = 25
TAG_PADDING = 5
TEXT_BASELINE_OFFSET = 8
GLYPH_RADIUS = 10
GLYPH_INSET = 20


def label_text(detection: ClassifiedDetection) -> str:
    return f"{detection.label} ({percent(detection.confidence)}%)"


def verdict_color(detection: ClassifiedDetection) -> Color:
    return BIODEGRADABLE_COLOR if detection.is_biodegradable else NON_BIODEGRADABLE_COLOR


class AnnotationRenderer:
    """Draws boxes, label tags and verdict glyphs in input order."""

    FONT = cv2.FONT_HERSHEY_SIMPLEX

    def __init__(self, font_scale: float = 0.5, thickness: int = 3) -> None:
        self.font_scale = font_scale
        self.thickness = thickness

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "AnnotationRenderer":
        return cls(font_scale=settings.overlay_font_scale, thickness=settings.box_thickness)

    def render(
        self,
        base_image: Optional[np.ndarray],
        detections: Sequence[ClassifiedDetection],
    ) -> np.ndarray:
        """Return a new annotated image; the base image is left untouched."""

        surface = self._acquire_surface(base_image)
        try:
            for detection in detections:
                self._draw_detection(surface, detection)
        except cv2.error as exc:
            raise RenderUnavailable(f"Unable to draw detections: {exc}") from exc
        LOGGER.debug("Rendered %d detections", len(detections))
        return surface

    def _acquire_surface(self, base_image: Optional[np.ndarray]) -> np.ndarray:
        if base_image is None:
            raise RenderUnavailable("No decoded image to draw on")
        if not isinstance(base_image, np.ndarray) or base_image.ndim not in (2, 3) or base_image.size == 0:
            raise RenderUnavailable("Image is not a drawable raster")
        if base_image.ndim == 3 and base_image.shape[2] not in (1, 3, 4):
            raise RenderUnavailable(f"Unsupported channel count {base_image.shape[2]}")
        try:
            if base_image.ndim == 2 or base_image.shape[2] == 1:
                return cv2.cvtColor(base_image, cv2.COLOR_GRAY2BGR)
            if base_image.shape[2] == 4:
                return cv2.cvtColor(base_image, cv2.COLOR_BGRA2BGR)
        except cv2.error as exc:
            raise RenderUnavailable(f"Unable to convert image for drawing: {exc}") from exc
        return np.ascontiguousarray(base_image).copy()

    def _draw_detection(self, surface: np.ndarray, detection: ClassifiedDetection) -> None:
        color = verdict_color(detection)
        height, width = surface.shape[:2]
        (x1, y1), (x2, y2) = box_corners(detection.box, width, height)
        cv2.rectangle(surface, (x1, y1), (x2, y2), color, self.thickness)

        text = label_text(detection)
        (text_width, _), _ = cv2.getTextSize(text, self.FONT, self.font_scale, 1)
        cv2.rectangle(
            surface,
            (x1, y1 - TAG_HEIGHT),
            (x1 + text_width + 2 * TAG_PADDING, y1),
            color,
            cv2.FILLED,
        )
        cv2.putText(
            surface,
            text,
            (x1 + TAG_PADDING, y1 - TEXT_BASELINE_OFFSET),
            self.FONT,
            self.font_scale,
            TEXT_COLOR,
            1,
            lineType=cv2.LINE_AA,
        )

        self._draw_glyph(surface, (x2 - GLYPH_INSET, y1 + GLYPH_INSET), detection.is_biodegradable, color)

    def _draw_glyph(self, surface: np.ndarray, center: Tuple[int, int], biodegradable: bool, color: Color) -> None:
        cx, cy = center
        cv2.circle(surface, center, GLYPH_RADIUS, color, cv2.FILLED, lineType=cv2.LINE_AA)
        if biodegradable:
            check = np.array([[cx - 5, cy], [cx - 1, cy + 4], [cx + 5, cy - 4]], dtype=np.int32)
            cv2.polylines(surface, [check], False, TEXT_COLOR, 2, lineType=cv2.LINE_AA)
        else:
            offset = GLYPH_RADIUS // 2
            cv2.line(surface, (cx - offset, cy - offset), (cx + offset, cy + offset), TEXT_COLOR, 2, lineType=cv2.LINE_AA)
            cv2.line(surface, (cx - offset, cy + offset), (cx + offset, cy - offset), TEXT_COLOR, 2, lineType=cv2.LINE_AA)
