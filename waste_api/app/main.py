import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from waste_api.app.settings import ApiSettings, get_detection_settings, get_settings
from waste_api.core.models import (
    AnalysisResponse,
    AnalysisStatus,
    ChartSlice,
    ConfidenceEntry,
    DetectionModel,
    Guidance,
    ResultsRequest,
    ResultsView,
    SummaryModel,
)
from waste_api.services.session_service import AnalysisInProgress, AnalysisSession, SessionRegistry
from waste_detection.app.errors import DetectionFailed, NoImageSelected
from waste_detection.app.services.aggregator import composition, confidence_breakdown, summarize
from waste_detection.app.services.classifier import DEFAULT_VOCABULARY
from waste_detection.app.services.detector import get_detector
from waste_detection.app.services.guidance import guidance_for
from waste_detection.app.services.pipeline import DetectionPipeline
from waste_detection.app.utils.images import to_data_url


logger = logging.getLogger(__name__)
settings = get_settings()
detection_settings = get_detection_settings()

pipeline = DetectionPipeline(settings=detection_settings)
sessions = SessionRegistry(idle_ttl=settings.session_idle_ttl, max_sessions=settings.max_sessions)

ANALYSIS_FAILED_DETAIL = "Failed to analyze image. Please try again."


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.preload_detector:
        try:
            await asyncio.to_thread(get_detector, detection_settings)
            logger.info("Detector preloaded at startup")
        except DetectionFailed:
            logger.exception("Detector preload failed; it will be retried on first analysis")
    yield


app = FastAPI(title="Waste Sorting API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_pipeline() -> DetectionPipeline:
    return pipeline


def get_api_settings() -> ApiSettings:
    return settings


def get_session(request: Request, cfg: ApiSettings = Depends(get_api_settings)) -> AnalysisSession:
    session_id = request.headers.get(cfg.session_header) or cfg.default_session
    return sessions.get(session_id)


def peek_session(request: Request, cfg: ApiSettings = Depends(get_api_settings)) -> AnalysisSession:
    session_id = request.headers.get(cfg.session_header) or cfg.default_session
    return sessions.peek(session_id)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/vocabulary")
async def vocabulary() -> list[str]:
    return list(DEFAULT_VOCABULARY)


@app.get("/analysis/status", response_model=AnalysisStatus)
async def analysis_status(session: AnalysisSession = Depends(peek_session)) -> AnalysisStatus:
    return AnalysisStatus(session_id=session.session_id, processing=session.processing, progress=session.progress)


@app.post("/analyze", response_model=AnalysisResponse)
async def analyze(
    image: Optional[UploadFile] = File(None),
    service: DetectionPipeline = Depends(get_pipeline),
    session: AnalysisSession = Depends(get_session),
    cfg: ApiSettings = Depends(get_api_settings),
) -> AnalysisResponse:
    """Run the detection pipeline on an uploaded image."""

    if image is None:
        raise HTTPException(status_code=400, detail=str(NoImageSelected()))
    data = await image.read(cfg.max_upload_bytes + 1)
    if len(data) > cfg.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Image exceeds the maximum upload size")

    try:
        session.begin()
    except AnalysisInProgress as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    try:
        result = await service.analyze_async(data, progress=session.update_progress)
    except NoImageSelected as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except DetectionFailed as exc:
        logger.error("Analysis of %s failed: %s", image.filename, exc)
        raise HTTPException(status_code=502, detail=ANALYSIS_FAILED_DETAIL) from exc
    finally:
        session.finish()

    annotated = to_data_url(result.annotated_image) if result.annotated_image is not None else None
    return AnalysisResponse(
        detections=[DetectionModel.from_detection(item) for item in result.detections],
        summary=SummaryModel.from_summary(result.summary),
        annotated_image=annotated,
        annotation_available=result.annotation_available,
        annotation_error=result.annotation_error,
        composition=[ChartSlice(**item) for item in composition(result.summary)],
        confidence=[ConfidenceEntry(**item) for item in confidence_breakdown(result.detections)],
        analysis_time=result.analysis_time,
    )


@app.post("/results", response_model=ResultsView)
async def results_view(payload: ResultsRequest) -> ResultsView:
    """Read-only view over previously computed results.

    A supplied summary is echoed back unchanged; it is only derived when the
    caller sends detections alone.
    """

    detections = [item.to_detection() for item in payload.detections]
    summary = payload.summary.to_summary() if payload.summary is not None else summarize(detections)
    return ResultsView(
        detections=[DetectionModel.from_detection(item) for item in detections],
        summary=payload.summary or SummaryModel.from_summary(summary),
        composition=[ChartSlice(**item) for item in composition(summary)],
        confidence=[ConfidenceEntry(**item) for item in confidence_breakdown(detections)],
        guidance=Guidance(**guidance_for(summary)),
        analysis_time=payload.analysis_time,
    )


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run("waste_api.app.main:app", host="0.0.0.0", port=8000)
