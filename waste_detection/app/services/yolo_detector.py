"""Local YOLO detection backend."""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import List

import numpy as np

try:  # pragma: no cover - import guarded for environments without ultralytics
    from ultralytics import YOLO
except ImportError as exc:  # pragma: no cover
    raise ImportError(
        "ultralytics package is required for the yolo detector backend. Install it via "
        "`pip install -e .[yolo]` or select WASTE_DETECTOR_BACKEND=remote."
    ) from exc

from ..models import CornerBox, RawDetection

LOGGER = logging.getLogger(__name__)


class YOLODetector:
    """Encapsulates YOLO inference on a single image."""

    def __init__(self, model_path: Path, confidence: float, iou: float, device: str = "cpu") -> None:
        self.model_path = model_path
        self.confidence = confidence
        self.iou = iou
        self.device = device
        LOGGER.info("Loading YOLO model from %s", model_path)
        self._model = YOLO(str(model_path))
        self._class_map = self._model.names
        # The ultralytics predictor keeps per-call state on the model.
        self._lock = threading.Lock()

    def detect(self, image: np.ndarray) -> List[RawDetection]:
        """Run inference on an image and return every detection above threshold."""

        with self._lock:
            results = self._model(
                image,
                verbose=False,
                iou=self.iou,
                conf=self.confidence,
                device=self.device,
            )
        detections: List[RawDetection] = []
        for result in results:
            boxes = result.boxes
            if boxes is None:
                continue
            for box in boxes:
                class_id = int(box.cls.item())
                label = self._class_map.get(class_id, str(class_id))
                xmin, ymin, xmax, ymax = box.xyxy.cpu().numpy().flatten().tolist()
                detections.append(
                    RawDetection(
                        label=label,
                        score=float(box.conf.item()),
                        box=CornerBox(xmin=xmin, ymin=ymin, xmax=xmax, ymax=ymax),
                    )
                )
        LOGGER.debug("Detected %d objects", len(detections))
        return detections
