"""Static disposal guidance attached to results views."""
from __future__ import annotations

from typing import Dict, List

from ..models import BIODEGRADABLE, NON_BIODEGRADABLE
from .aggregator import AnalysisSummary

DISPOSAL_METHODS: Dict[str, List[str]] = {
    BIODEGRADABLE: [
        "Compost bin or backyard composting",
        "Municipal organic waste collection",
        "Food waste recycling programs",
        "Worm composting (vermicomposting)",
    ],
    NON_BIODEGRADABLE: [
        "Clean and place in recycling bin",
        "Check local recycling guidelines",
        "Take to specialized recycling centers",
        "Reduce usage and reuse when possible",
    ],
}

ECO_TIPS: List[str] = [
    "Consider using reusable alternatives to reduce non-biodegradable waste",
    "Start a home compost for organic materials",
    "Check your local recycling guidelines for proper sorting",
    "Reduce single-use items to minimize environmental impact",
]


def guidance_for(summary: AnalysisSummary) -> Dict[str, object]:
    """Return disposal methods for the categories present in a run plus general tips."""

    methods: Dict[str, List[str]] = {}
    if summary.bio_count:
        methods[BIODEGRADABLE] = list(DISPOSAL_METHODS[BIODEGRADABLE])
    if summary.non_bio_count:
        methods[NON_BIODEGRADABLE] = list(DISPOSAL_METHODS[NON_BIODEGRADABLE])
    return {"disposal_methods": methods, "eco_tips": list(ECO_TIPS)}
