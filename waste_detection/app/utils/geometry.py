"""Geometry helper utilities for bounding boxes."""
from __future__ import annotations

from typing import Tuple

from ..models import Box, CornerBox

Point = Tuple[int, int]

# Points further than this outside the surface are pulled in before drawing.
DRAW_MARGIN = 1000


def corners_to_box(corners: CornerBox) -> Box:
    """Convert an xyxy detector box into an xywh box without clamping."""

    return Box(
        x=corners.xmin,
        y=corners.ymin,
        width=corners.xmax - corners.xmin,
        height=corners.ymax - corners.ymin,
    )


def _clip(value: float, size: int, margin: int) -> int:
    return int(round(min(max(value, -margin), size + margin)))


def box_corners(box: Box, width: int, height: int, margin: int = DRAW_MARGIN) -> Tuple[Point, Point]:
    """Return integer top-left and bottom-right points for drawing on a ``width`` x ``height`` surface.

    The box itself is not modified; only the points handed to cv2 are kept
    within ``margin`` pixels of the surface so they fit cv2's int32 coordinates.
    """

    x1, y1 = _clip(box.x, width, margin), _clip(box.y, height, margin)
    x2, y2 = _clip(box.x + box.width, width, margin), _clip(box.y + box.height, height, margin)
    return (x1, y1), (x2, y2)
