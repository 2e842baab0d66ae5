"""Detection -> classification -> annotation/summary pipeline."""
from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from ..config.settings import AppSettings, load_settings
from ..errors import DetectionFailed, NoImageSelected, RenderUnavailable
from ..models import ClassifiedDetection, RawDetection
from ..utils.images import ImageInput, load_image
from .aggregator import AnalysisSummary, summarize
from .classifier import DEFAULT_VOCABULARY, Vocabulary, classify_detections
from .detector import ObjectDetector, get_detector, validate_detection
from .renderer import AnnotationRenderer

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

PROGRESS_STARTED = 0
PROGRESS_DECODED = 10
PROGRESS_DETECTOR_READY = 50
PROGRESS_CLASSIFIED = 80
PROGRESS_DONE = 100


@dataclass(frozen=True)
class AnalysisResult:
    detections: Tuple[ClassifiedDetection, ...]
    summary: AnalysisSummary
    annotated_image: Optional[np.ndarray] = field(default=None, compare=False, repr=False)
    annotation_error: Optional[str] = None
    analysis_time: float = 0.0

    @property
    def annotation_available(self) -> bool:
        return self.annotated_image is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detections": [detection.to_dict() for detection in self.detections],
            "summary": self.summary.to_dict(),
            "annotation_available": self.annotation_available,
            "annotation_error": self.annotation_error,
            "analysis_time": self.analysis_time,
        }


class DetectionPipeline:
    """Runs one analysis per call; holds no state between runs.

    When no detector is supplied, the process-wide detector for ``settings``
    is loaded on first use so that load failures are reported as
    ``DetectionFailed`` for the triggering analysis.
    """

    def __init__(
        self,
        detector: Optional[ObjectDetector] = None,
        *,
        settings: Optional[AppSettings] = None,
        renderer: Optional[AnnotationRenderer] = None,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    ) -> None:
        self.settings = settings or load_settings()
        self._detector = detector
        self.renderer = renderer or AnnotationRenderer.from_settings(self.settings)
        self.vocabulary = vocabulary
        # Detector backends are not assumed to be thread-safe.
        self._detect_lock = threading.Lock()

    def analyze(self, image: Optional[ImageInput], progress: Optional[ProgressCallback] = None) -> AnalysisResult:
        started = time.perf_counter()
        decoded = self._prepare(image, progress)
        raw = self._run_detector(decoded, progress)
        return self._finish(decoded, raw, started, progress)

    async def analyze_async(
        self,
        image: Optional[ImageInput],
        progress: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """Same as ``analyze`` but suspends while the detector runs in a worker thread."""

        started = time.perf_counter()
        decoded = self._prepare(image, progress)
        raw = await asyncio.to_thread(self._run_detector, decoded, progress)
        return self._finish(decoded, raw, started, progress)

    def _prepare(self, image: Optional[ImageInput], progress: Optional[ProgressCallback]) -> np.ndarray:
        if image is None or (isinstance(image, (bytes, bytearray, str)) and not image):
            raise NoImageSelected()
        if isinstance(image, np.ndarray) and image.size == 0:
            raise NoImageSelected()
        LOGGER.info("Starting waste analysis")
        _report(progress, PROGRESS_STARTED)
        decoded = load_image(image)
        if decoded is None:
            LOGGER.error("Image input could not be decoded")
            raise DetectionFailed("Unsupported or unreadable image input")
        _report(progress, PROGRESS_DECODED)
        return decoded

    def _resolve_detector(self) -> ObjectDetector:
        if self._detector is None:
            self._detector = get_detector(self.settings)
        return self._detector

    def _run_detector(self, image: np.ndarray, progress: Optional[ProgressCallback]) -> List[RawDetection]:
        try:
            detector = self._resolve_detector()
            _report(progress, PROGRESS_DETECTOR_READY)
            with self._detect_lock:
                found = detector.detect(image)
            return [validate_detection(item) for item in found]
        except DetectionFailed:
            LOGGER.exception("Object detection failed")
            raise
        except Exception as exc:
            LOGGER.exception("Object detection failed")
            raise DetectionFailed(f"Object detection failed: {exc}") from exc

    def _finish(
        self,
        image: np.ndarray,
        raw: List[RawDetection],
        started: float,
        progress: Optional[ProgressCallback],
    ) -> AnalysisResult:
        detections = tuple(classify_detections(raw, self.vocabulary))
        _report(progress, PROGRESS_CLASSIFIED)
        summary = summarize(detections)

        annotated: Optional[np.ndarray] = None
        annotation_error: Optional[str] = None
        try:
            annotated = self.renderer.render(image, detections)
        except RenderUnavailable as exc:
            annotation_error = str(exc)
            LOGGER.warning("Annotation unavailable: %s", exc)

        elapsed = time.perf_counter() - started
        _report(progress, PROGRESS_DONE)
        LOGGER.info("Analysis complete! %s (%.2fs)", summary.describe(), elapsed)
        return AnalysisResult(
            detections=detections,
            summary=summary,
            annotated_image=annotated,
            annotation_error=annotation_error,
            analysis_time=elapsed,
        )


def _report(progress: Optional[ProgressCallback], value: int) -> None:
    if progress is not None:
        progress(value)
