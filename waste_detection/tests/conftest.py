from __future__ import annotations

from typing import List

import cv2
import numpy as np
import pytest

from waste_detection.app.config.settings import AppSettings
from waste_detection.app.models import RawDetection
from detection_fakes import raw


@pytest.fixture()
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        output_dir=tmp_path / "output",
        detector_backend="remote",
        remote_endpoint="http://detector.local/infer",
    )


@pytest.fixture()
def sample_detections() -> List[RawDetection]:
    return [
        raw("apple", 0.92, 10, 15, 40, 50),
        raw("bottle", 0.88, 45, 20, 70, 60),
    ]


@pytest.fixture()
def blank_image() -> np.ndarray:
    return np.zeros((100, 100, 3), dtype=np.uint8)


@pytest.fixture()
def png_bytes(blank_image: np.ndarray) -> bytes:
    success, buffer = cv2.imencode(".png", blank_image)
    assert success
    return buffer.tobytes()
