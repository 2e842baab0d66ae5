"""Export the annotated image and JSON report of the latest analysis."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import cv2
import numpy as np

from ..config.settings import AppSettings
from .aggregator import composition, confidence_breakdown
from .guidance import guidance_for
from .pipeline import AnalysisResult

LOGGER = logging.getLogger(__name__)

ANNOTATED_FILENAME = "annotated.png"
REPORT_FILENAME = "report.json"


def reset_output_state(settings: AppSettings) -> None:
    """Remove the previous run's artifacts so only the latest analysis is kept."""

    output_dir = settings.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    for name in (ANNOTATED_FILENAME, REPORT_FILENAME):
        artifact = output_dir / name
        try:
            if artifact.exists():
                artifact.unlink()
                LOGGER.debug("Removed stale artifact %s", artifact)
        except OSError as exc:
            LOGGER.warning("Unable to remove artifact %s: %s", artifact, exc)


def build_report(result: AnalysisResult, source: Optional[str] = None) -> Dict[str, Any]:
    payload = result.to_dict()
    payload.update(
        {
            "schema_version": 1,
            "generated_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "source": source,
            "composition": composition(result.summary),
            "confidence": confidence_breakdown(result.detections),
            "guidance": guidance_for(result.summary),
        }
    )
    return payload


class OutputManager:
    """Write analysis artifacts into the configured output directory."""

    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings
        self.output_dir = settings.output_dir
        reset_output_state(settings)

    def save(self, result: AnalysisResult, source: Optional[str] = None) -> Dict[str, Optional[Path]]:
        """Persist report and, when available, the annotated image."""

        image_path: Optional[Path] = None
        if result.annotated_image is not None:
            image_path = self.save_annotated_image(result.annotated_image)
        report_path = self.save_report(build_report(result, source))
        return {"annotated_image": image_path, "report": report_path}

    def save_annotated_image(self, image: np.ndarray) -> Path:
        target = self.output_dir / ANNOTATED_FILENAME
        temp_path = self.output_dir / "annotated.tmp.png"
        if not cv2.imwrite(str(temp_path), image):
            raise OSError(f"Unable to write annotated image to {temp_path}")
        temp_path.replace(target)
        LOGGER.debug("Saved annotated image %s", target)
        return target

    def save_report(self, payload: Dict[str, Any]) -> Path:
        target = self.output_dir / REPORT_FILENAME
        with target.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
        LOGGER.info("Wrote analysis report to %s", target)
        return target
