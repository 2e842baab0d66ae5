"""Summary statistics over classified detections."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence

from ..models import BIODEGRADABLE, NON_BIODEGRADABLE, ClassifiedDetection

GRADE_A_ABOVE = 60.0
GRADE_B_ABOVE = 40.0


@dataclass(frozen=True)
class AnalysisSummary:
    total: int
    bio_count: int
    percentage: float
    grade: str

    @property
    def non_bio_count(self) -> int:
        return self.total - self.bio_count

    @property
    def non_bio_percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return 100.0 - self.percentage

    def describe(self) -> str:
        return (
            f"Found {self.bio_count} biodegradable and "
            f"{self.non_bio_count} non-biodegradable items"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "bio_count": self.bio_count,
            "non_bio_count": self.non_bio_count,
            "percentage": self.percentage,
            "grade": self.grade,
        }


def percent(confidence: float) -> int:
    """Round a [0, 1] confidence to a whole percentage, halves rounding up."""

    return int(math.floor(confidence * 100 + 0.5))


def grade_for(percentage: float) -> str:
    """Letter grade with strict thresholds: exactly 60 is B, exactly 40 is C."""

    if percentage > GRADE_A_ABOVE:
        return "A"
    if percentage > GRADE_B_ABOVE:
        return "B"
    return "C"


def summarize(detections: Iterable[ClassifiedDetection]) -> AnalysisSummary:
    """Compute counts, biodegradable percentage and grade for one run."""

    items = list(detections)
    total = len(items)
    bio_count = sum(1 for item in items if item.is_biodegradable)
    percentage = (bio_count * 100.0 / total) if total else 0.0
    return AnalysisSummary(
        total=total,
        bio_count=bio_count,
        percentage=percentage,
        grade=grade_for(percentage),
    )


def composition(summary: AnalysisSummary) -> List[Dict[str, Any]]:
    """Chart slices for the biodegradable/non-biodegradable split."""

    return [
        {
            "name": "Biodegradable",
            "category": BIODEGRADABLE,
            "value": summary.bio_count,
            "percentage": summary.percentage,
        },
        {
            "name": "Non-Biodegradable",
            "category": NON_BIODEGRADABLE,
            "value": summary.non_bio_count,
            "percentage": summary.non_bio_percentage,
        },
    ]


def confidence_breakdown(detections: Sequence[ClassifiedDetection]) -> List[Dict[str, Any]]:
    return [
        {
            "name": detection.label,
            "confidence": percent(detection.confidence),
            "type": detection.category,
        }
        for detection in detections
    ]
