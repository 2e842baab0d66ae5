#!/usr/bin/env python3
"""Fetch YOLO weights into the path the yolo detector backend loads from."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import requests

from waste_detection.app.config.settings import load_settings

LOGGER = logging.getLogger(__name__)

RELEASE_BASE = "https://github.com/ultralytics/assets/releases/download/v0.0.0"
VARIANTS = ("n", "s", "m", "l", "x")
CHUNK_SIZE = 1 << 20


def weights_url(variant: str) -> str:
    return f"{RELEASE_BASE}/yolov8{variant}.pt"


def download_weights(url: str, target: Path, *, force: bool = False) -> bool:
    """Stream weights to ``target``; returns False when an existing file was kept."""

    if target.exists() and not force:
        LOGGER.info("Weights already present at %s", target)
        return False
    target.parent.mkdir(parents=True, exist_ok=True)
    partial = target.with_suffix(target.suffix + ".part")
    with requests.get(url, timeout=60, stream=True) as response:
        response.raise_for_status()
        with partial.open("wb") as handle:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    handle.write(chunk)
    partial.replace(target)
    LOGGER.info("Model weights downloaded to %s", target)
    return True


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Download YOLO weights for waste detection")
    parser.add_argument("--variant", choices=VARIANTS, default="m", help="YOLOv8 size variant")
    parser.add_argument("--url", type=str, default=None, help="Weights URL override")
    parser.add_argument("--output", type=Path, default=None, help="Destination, defaults to WASTE_MODEL_PATH")
    parser.add_argument("--force", action="store_true", help="Replace existing weights")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    args = parse_args(argv)
    url = args.url or weights_url(args.variant)
    target = args.output or load_settings().model_path
    download_weights(url, target, force=args.force)


if __name__ == "__main__":
    main()
