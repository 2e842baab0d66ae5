"""Object detector interface, remote backend and process-wide detector instance."""
from __future__ import annotations

import logging
import math
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol

import numpy as np
import requests

from ..config.settings import AppSettings
from ..errors import DetectionFailed
from ..models import CornerBox, RawDetection
from ..utils.images import encode_png

LOGGER = logging.getLogger(__name__)


class ObjectDetector(Protocol):
    def detect(self, image: np.ndarray) -> List[RawDetection]: ...


def validate_detection(detection: RawDetection) -> RawDetection:
    """Reject non-finite coordinates and scores outside [0, 1]."""

    box = detection.box
    values = (detection.score, box.xmin, box.ymin, box.xmax, box.ymax)
    if not all(math.isfinite(value) for value in values):
        raise DetectionFailed(f"Non-finite value in detection '{detection.label}'")
    if not 0.0 <= detection.score <= 1.0:
        raise DetectionFailed(f"Score {detection.score} out of range for '{detection.label}'")
    return detection


def parse_detections(payload: Any, min_score: float = 0.0) -> List[RawDetection]:
    """Parse the standard object-detection JSON payload.

    Each entry looks like ``{"label": str, "score": float, "box": {"xmin", "ymin", "xmax", "ymax"}}``.
    """

    if not isinstance(payload, list):
        raise DetectionFailed(f"Unexpected detector payload type {type(payload).__name__}")
    detections: List[RawDetection] = []
    for entry in payload:
        try:
            box = entry["box"]
            detection = RawDetection(
                label=str(entry["label"]),
                score=float(entry["score"]),
                box=CornerBox(
                    xmin=float(box["xmin"]),
                    ymin=float(box["ymin"]),
                    xmax=float(box["xmax"]),
                    ymax=float(box["ymax"]),
                ),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise DetectionFailed(f"Malformed detection entry: {entry!r}") from exc
        validate_detection(detection)
        if detection.score < min_score:
            continue
        detections.append(detection)
    return detections


class RemoteDetector:
    """Runs inference against an HTTP object-detection service."""

    def __init__(
        self,
        endpoint: str,
        confidence: float,
        token: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint
        self.confidence = confidence
        self.timeout = timeout
        self._session = session or requests.Session()
        self._headers: Dict[str, str] = {"Content-Type": "application/octet-stream"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def detect(self, image: np.ndarray) -> List[RawDetection]:
        try:
            response = self._session.post(
                self.endpoint,
                data=encode_png(image),
                headers=self._headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise DetectionFailed(f"Remote detector request failed: {exc}") from exc
        detections = parse_detections(payload, min_score=self.confidence)
        LOGGER.debug("Remote detector returned %d objects", len(detections))
        return detections

    def close(self) -> None:
        self._session.close()


def _build_yolo(settings: AppSettings) -> ObjectDetector:
    from .yolo_detector import YOLODetector

    return YOLODetector(
        settings.model_path,
        settings.confidence_threshold,
        settings.iou_threshold,
        device=settings.device,
    )


def _build_remote(settings: AppSettings) -> ObjectDetector:
    if not settings.remote_endpoint:
        raise ValueError("remote_endpoint must be configured for the remote detector backend")
    return RemoteDetector(
        settings.remote_endpoint,
        settings.confidence_threshold,
        token=settings.remote_token,
        timeout=settings.remote_timeout,
    )


BACKENDS: Dict[str, Callable[[AppSettings], ObjectDetector]] = {
    "yolo": _build_yolo,
    "remote": _build_remote,
}

# Loaded once per process and shared by every analysis.
_detector: Optional[ObjectDetector] = None
_detector_lock = threading.Lock()


def build_detector(settings: AppSettings) -> ObjectDetector:
    """Instantiate the configured backend, wrapping any load failure."""

    factory = BACKENDS.get(settings.detector_backend)
    if factory is None:
        raise DetectionFailed(f"Unknown detector backend '{settings.detector_backend}'")
    LOGGER.info("Loading %s detector", settings.detector_backend)
    try:
        return factory(settings)
    except DetectionFailed:
        raise
    except Exception as exc:
        raise DetectionFailed(f"Unable to load {settings.detector_backend} detector: {exc}") from exc


def get_detector(settings: AppSettings) -> ObjectDetector:
    """Return the shared detector, building it on first use."""

    global _detector
    if _detector is not None:
        return _detector
    with _detector_lock:
        if _detector is None:
            _detector = build_detector(settings)
    return _detector


def reset_detector() -> None:
    """Drop the shared detector so the next call rebuilds it."""

    global _detector
    with _detector_lock:
        _detector = None
