from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from waste_detection.app.models import CornerBox, RawDetection


class FakeDetector:
    """In-memory detector returning canned output."""

    def __init__(self, detections: Sequence[RawDetection] = (), error: Optional[Exception] = None) -> None:
        self.detections = list(detections)
        self.error = error
        self.calls = 0

    def detect(self, image: np.ndarray) -> List[RawDetection]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.detections)


def raw(label: str, score: float, xmin: float, ymin: float, xmax: float, ymax: float) -> RawDetection:
    return RawDetection(label=label, score=score, box=CornerBox(xmin=xmin, ymin=ymin, xmax=xmax, ymax=ymax))
