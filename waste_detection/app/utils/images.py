"""Image decoding and encoding utilities."""
from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

LOGGER = logging.getLogger(__name__)

ImageInput = Union[bytes, bytearray, str, Path, np.ndarray]


def decode_image(data: bytes) -> Optional[np.ndarray]:
    """Decode encoded image bytes into a BGR array, or None when unsupported."""

    buffer = np.frombuffer(data, dtype=np.uint8)
    if buffer.size == 0:
        return None
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if image is None:
        LOGGER.debug("Unable to decode %d bytes of image data", len(data))
        return None
    return ensure_bgr(image)


def ensure_bgr(image: np.ndarray) -> np.ndarray:
    """Normalise grayscale and BGRA arrays to three-channel BGR."""

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    if image.ndim == 3 and image.shape[2] == 1:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    return image


def load_image(source: ImageInput) -> Optional[np.ndarray]:
    """Return a BGR array for bytes, a filesystem path, or an existing array."""

    if isinstance(source, np.ndarray):
        return ensure_bgr(source)
    if isinstance(source, (str, Path)):
        path = Path(source).expanduser()
        if not path.is_file():
            LOGGER.debug("Image path %s does not exist", path)
            return None
        return decode_image(path.read_bytes())
    return decode_image(bytes(source))


def encode_png(image: np.ndarray) -> bytes:
    """Encode a BGR array as PNG bytes."""

    success, buffer = cv2.imencode(".png", image)
    if not success:
        raise ValueError("Unable to encode image as PNG")
    return buffer.tobytes()


def to_data_url(image: np.ndarray) -> str:
    """Return a PNG data URL suitable for direct display in a browser."""

    encoded = base64.b64encode(encode_png(image)).decode("ascii")
    return f"data:image/png;base64,{encoded}"
