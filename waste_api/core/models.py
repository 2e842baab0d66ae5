from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from waste_detection.app.models import Box, ClassifiedDetection
from waste_detection.app.services.aggregator import AnalysisSummary


class BoxModel(BaseModel):
    x: float
    y: float
    width: float
    height: float


class DetectionModel(BaseModel):
    label: str
    confidence: float = Field(ge=0.0, le=1.0)
    box: BoxModel
    is_biodegradable: bool
    category: Optional[Literal["biodegradable", "non-biodegradable"]] = None

    @classmethod
    def from_detection(cls, detection: ClassifiedDetection) -> "DetectionModel":
        return cls(
            label=detection.label,
            confidence=detection.confidence,
            box=BoxModel(**detection.box.to_dict()),
            is_biodegradable=detection.is_biodegradable,
            category=detection.category,
        )

    def to_detection(self) -> ClassifiedDetection:
        return ClassifiedDetection(
            label=self.label,
            confidence=self.confidence,
            box=Box(x=self.box.x, y=self.box.y, width=self.box.width, height=self.box.height),
            is_biodegradable=self.is_biodegradable,
        )


class SummaryModel(BaseModel):
    total: int = Field(ge=0)
    bio_count: int = Field(ge=0)
    non_bio_count: Optional[int] = None
    percentage: float = Field(ge=0.0, le=100.0)
    grade: Literal["A", "B", "C"]

    @model_validator(mode="after")
    def check_counts(self) -> "SummaryModel":
        if self.bio_count > self.total:
            raise ValueError("bio_count cannot exceed total")
        if self.non_bio_count is not None and self.non_bio_count != self.total - self.bio_count:
            raise ValueError("non_bio_count must equal total - bio_count")
        return self

    @classmethod
    def from_summary(cls, summary: AnalysisSummary) -> "SummaryModel":
        return cls(**summary.to_dict())

    def to_summary(self) -> AnalysisSummary:
        return AnalysisSummary(
            total=self.total,
            bio_count=self.bio_count,
            percentage=self.percentage,
            grade=self.grade,
        )


class ChartSlice(BaseModel):
    name: str
    category: str
    value: int
    percentage: float


class ConfidenceEntry(BaseModel):
    name: str
    confidence: int
    type: str


class Guidance(BaseModel):
    disposal_methods: Dict[str, List[str]]
    eco_tips: List[str]


class AnalysisResponse(BaseModel):
    detections: List[DetectionModel]
    summary: SummaryModel
    annotated_image: Optional[str] = None
    annotation_available: bool
    annotation_error: Optional[str] = None
    composition: List[ChartSlice]
    confidence: List[ConfidenceEntry]
    analysis_time: float


class ResultsRequest(BaseModel):
    detections: List[DetectionModel]
    summary: Optional[SummaryModel] = None
    analysis_time: Optional[float] = None


class ResultsView(BaseModel):
    detections: List[DetectionModel]
    summary: SummaryModel
    composition: List[ChartSlice]
    confidence: List[ConfidenceEntry]
    guidance: Guidance
    analysis_time: Optional[float] = None


class AnalysisStatus(BaseModel):
    session_id: str
    processing: bool
    progress: int
