"""Keyword-based biodegradability classification."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..models import ClassifiedDetection, RawDetection
from ..utils.geometry import corners_to_box

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vocabulary:
    """Ordered, immutable set of lowercase biodegradable-indicator terms."""

    terms: Tuple[str, ...]

    def __post_init__(self) -> None:
        normalized = tuple(dict.fromkeys(term.lower() for term in self.terms if term))
        object.__setattr__(self, "terms", normalized)

    def match(self, label: str) -> Optional[str]:
        """Return the first term overlapping the label, if any.

        A term overlaps when the lower-cased label contains it or it contains
        the label. The empty label never matches.
        """

        normalized = label.lower()
        if not normalized:
            return None
        for term in self.terms:
            if term in normalized or normalized in term:
                return term
        return None

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and self.match(label) is not None

    def __iter__(self):
        return iter(self.terms)

    def __len__(self) -> int:
        return len(self.terms)


DEFAULT_VOCABULARY = Vocabulary(
    (
        "apple",
        "banana",
        "orange",
        "carrot",
        "broccoli",
        "lettuce",
        "tomato",
        "food",
        "fruit",
        "vegetable",
        "bread",
        "paper",
        "cardboard",
        "wood",
        "leaves",
        "flowers",
        "plant",
        "organic",
    )
)


def classify(label: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    """Return True when the label is considered biodegradable."""

    return vocabulary.match(label) is not None


def classify_detection(detection: RawDetection, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> ClassifiedDetection:
    return ClassifiedDetection(
        label=detection.label,
        confidence=detection.score,
        box=corners_to_box(detection.box),
        is_biodegradable=classify(detection.label, vocabulary),
    )


def classify_detections(
    detections: Iterable[RawDetection],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> List[ClassifiedDetection]:
    """Classify detector output, preserving the detector's ordering."""

    classified = [classify_detection(detection, vocabulary) for detection in detections]
    LOGGER.debug("Classified %d detections", len(classified))
    return classified
