"""Error kinds raised by the analysis pipeline."""
from __future__ import annotations


class AnalysisError(Exception):
    """Base class for failures of a single analysis attempt."""


class NoImageSelected(AnalysisError):
    """Analysis was triggered without an input image."""

    def __init__(self, message: str = "Please select an image first") -> None:
        super().__init__(message)


class DetectionFailed(AnalysisError):
    """The object detector could not be loaded or failed during inference."""


class RenderUnavailable(AnalysisError):
    """No drawing surface could be acquired for the annotated image."""
