from __future__ import annotations

from typing import List

import pytest

from waste_detection.app.models import Box, ClassifiedDetection
from waste_detection.app.services.aggregator import (
    composition,
    confidence_breakdown,
    grade_for,
    percent,
    summarize,
)
from waste_detection.app.services.guidance import DISPOSAL_METHODS, ECO_TIPS, guidance_for


def build_detections(bio: int, total: int) -> List[ClassifiedDetection]:
    return [
        ClassifiedDetection(
            label=f"item-{idx}",
            confidence=0.5,
            box=Box(x=0, y=0, width=1, height=1),
            is_biodegradable=idx < bio,
        )
        for idx in range(total)
    ]


def test_summarize_empty_list() -> None:
    summary = summarize([])
    assert summary.total == 0
    assert summary.bio_count == 0
    assert summary.non_bio_count == 0
    assert summary.percentage == 0
    assert summary.non_bio_percentage == 0
    assert summary.grade == "C"


@pytest.mark.parametrize(
    "bio, total, grade",
    [
        (3, 5, "B"),
        (2, 5, "C"),
        (61, 100, "A"),
        (41, 100, "B"),
        (5, 5, "A"),
        (0, 3, "C"),
    ],
)
def test_grade_boundaries(bio: int, total: int, grade: str) -> None:
    summary = summarize(build_detections(bio, total))
    assert summary.grade == grade


def test_grade_for_is_strict() -> None:
    assert grade_for(60.0) == "B"
    assert grade_for(60.01) == "A"
    assert grade_for(40.0) == "C"
    assert grade_for(40.01) == "B"


def test_counts_always_add_up() -> None:
    for total in range(0, 7):
        for bio in range(0, total + 1):
            summary = summarize(build_detections(bio, total))
            assert summary.total == total
            assert summary.bio_count + summary.non_bio_count == summary.total


def test_summary_describe_and_dict() -> None:
    summary = summarize(build_detections(1, 2))
    assert summary.describe() == "Found 1 biodegradable and 1 non-biodegradable items"
    assert summary.to_dict() == {
        "total": 2,
        "bio_count": 1,
        "non_bio_count": 1,
        "percentage": 50.0,
        "grade": "B",
    }


def test_composition_slices() -> None:
    slices = composition(summarize(build_detections(1, 4)))
    assert [item["value"] for item in slices] == [1, 3]
    assert [item["percentage"] for item in slices] == [25.0, 75.0]


def test_confidence_breakdown_rounds_half_up() -> None:
    detections = build_detections(1, 2)
    detections[0] = ClassifiedDetection(label="apple", confidence=0.925, box=Box(0, 0, 1, 1), is_biodegradable=True)
    breakdown = confidence_breakdown(detections)
    assert breakdown[0] == {"name": "apple", "confidence": 93, "type": "biodegradable"}
    assert breakdown[1]["type"] == "non-biodegradable"
    assert percent(0.885) == 89
    assert percent(0.0) == 0
    assert percent(1.0) == 100


def test_guidance_only_lists_present_categories() -> None:
    only_bio = guidance_for(summarize(build_detections(2, 2)))
    assert list(only_bio["disposal_methods"]) == ["biodegradable"]
    assert only_bio["eco_tips"] == ECO_TIPS

    mixed = guidance_for(summarize(build_detections(1, 2)))
    assert mixed["disposal_methods"] == DISPOSAL_METHODS

    empty = guidance_for(summarize([]))
    assert empty["disposal_methods"] == {}
