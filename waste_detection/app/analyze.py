"""Entry point for single-image waste analysis."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config.settings import AppSettings, load_settings
from .errors import AnalysisError
from .services.output_writer import OutputManager
from .services.pipeline import AnalysisResult, DetectionPipeline

LOGGER = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Waste Detection - Biodegradability Analysis")
    parser.add_argument("--image", type=str, required=True, help="Path to the image to analyze")
    parser.add_argument("--backend", choices=["yolo", "remote"], default=None, help="Detector backend")
    parser.add_argument("--model", type=str, default=None, help="Path to YOLO weights file")
    parser.add_argument("--conf", type=float, default=None, help="Confidence threshold")
    parser.add_argument("--iou", type=float, default=None, help="IoU threshold")
    parser.add_argument("--device", type=str, default=None, help="Inference device, e.g. cpu or cuda:0")
    parser.add_argument("--endpoint", type=str, default=None, help="Remote inference endpoint URL")
    parser.add_argument("--output-dir", type=str, default=None, help="Directory for annotated image and report")
    parser.add_argument("--no-save", action="store_true", help="Print the summary without writing artifacts")
    parser.add_argument("--log-format", choices=["text", "json"], default=None, help="Logging format")
    return parser


def setup_logging(settings: AppSettings) -> None:
    log_level = logging.INFO
    if settings.log_format == "json":
        formatter = logging.Formatter('{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}')
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logging.basicConfig(level=log_level, handlers=[handler])


def resolve_settings(args: argparse.Namespace) -> AppSettings:
    overrides = {}
    if args.backend:
        overrides["detector_backend"] = args.backend
    if args.model:
        overrides["model_path"] = Path(args.model)
    if args.conf is not None:
        overrides["confidence_threshold"] = args.conf
    if args.iou is not None:
        overrides["iou_threshold"] = args.iou
    if args.device:
        overrides["device"] = args.device
    if args.endpoint:
        overrides["remote_endpoint"] = args.endpoint
    if args.output_dir:
        overrides["output_dir"] = Path(args.output_dir)
    if args.log_format:
        overrides["log_format"] = args.log_format

    settings = load_settings(**overrides)
    return settings


def format_result(result: AnalysisResult) -> List[str]:
    summary = result.summary
    lines = [
        f"Items: {summary.total} | Biodegradable: {summary.bio_count} ({summary.percentage:.1f}%)"
        f" | Non-biodegradable: {summary.non_bio_count} ({summary.non_bio_percentage:.1f}%)",
        f"Eco score: {summary.grade}",
    ]
    for detection in result.detections:
        lines.append(f"  - {detection.label}: {detection.confidence:.2f} -> {detection.category}")
    if result.annotation_error:
        lines.append(f"Annotation unavailable: {result.annotation_error}")
    return lines


def run_analysis(args: argparse.Namespace) -> int:
    settings = resolve_settings(args)
    setup_logging(settings)

    pipeline = DetectionPipeline(settings=settings)
    try:
        result = pipeline.analyze(Path(args.image))
    except AnalysisError as exc:
        LOGGER.error("Failed to analyze image %s: %s", args.image, exc)
        return 1

    for line in format_result(result):
        print(line)

    if not args.no_save:
        paths = OutputManager(settings).save(result, source=str(args.image))
        for name, path in paths.items():
            if path is not None:
                print(f"{name}: {path}")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    sys.exit(run_analysis(args))


if __name__ == "__main__":  # pragma: no cover
    main()
