from __future__ import annotations

import numpy as np
import pytest

from waste_detection.app.errors import RenderUnavailable
from waste_detection.app.models import Box, ClassifiedDetection
from waste_detection.app.services.renderer import (
    BIODEGRADABLE_COLOR,
    NON_BIODEGRADABLE_COLOR,
    AnnotationRenderer,
    label_text,
)
from waste_detection.app.utils.geometry import DRAW_MARGIN, box_corners


def detection(label: str, bio: bool, x: float = 10, y: float = 40, width: float = 50, height: float = 40) -> ClassifiedDetection:
    return ClassifiedDetection(
        label=label,
        confidence=0.92,
        box=Box(x=x, y=y, width=width, height=height),
        is_biodegradable=bio,
    )


def test_render_empty_list_is_a_copy(blank_image: np.ndarray) -> None:
    renderer = AnnotationRenderer()
    annotated = renderer.render(blank_image, [])

    assert annotated is not blank_image
    assert np.array_equal(annotated, blank_image)


def test_render_draws_without_mutating_source(blank_image: np.ndarray) -> None:
    renderer = AnnotationRenderer()
    original = blank_image.copy()

    annotated = renderer.render(blank_image, [detection("apple", True)])

    assert np.array_equal(blank_image, original)
    assert not np.array_equal(annotated, blank_image)
    assert annotated.shape == blank_image.shape


def test_render_uses_verdict_colors(blank_image: np.ndarray) -> None:
    renderer = AnnotationRenderer(thickness=3)

    bio = renderer.render(blank_image, [detection("apple", True)])
    non_bio = renderer.render(blank_image, [detection("bottle", False)])

    # left edge of the box, below the tag
    assert tuple(bio[60, 10]) == BIODEGRADABLE_COLOR
    assert tuple(non_bio[60, 10]) == NON_BIODEGRADABLE_COLOR


def test_label_tag_sits_above_box(blank_image: np.ndarray) -> None:
    renderer = AnnotationRenderer()
    annotated = renderer.render(blank_image, [detection("apple", True, y=40)])

    tag_region = annotated[16:39, 10:20]
    assert np.any(tag_region != 0)


def test_long_labels_expand_the_tag() -> None:
    image = np.zeros((120, 400, 3), dtype=np.uint8)
    renderer = AnnotationRenderer()
    short = renderer.render(image, [detection("a", False, x=5, y=60, width=20, height=20)])
    long = renderer.render(image, [detection("a very long compound label", False, x=5, y=60, width=20, height=20)])

    short_width = np.count_nonzero(np.any(short[36:60] != 0, axis=(0, 2)))
    long_width = np.count_nonzero(np.any(long[36:60] != 0, axis=(0, 2)))
    assert long_width > short_width


def test_later_detections_paint_over_earlier(blank_image: np.ndarray) -> None:
    renderer = AnnotationRenderer()
    first = detection("apple", True)
    second = detection("bottle", False)

    annotated = renderer.render(blank_image, [first, second])

    assert tuple(annotated[60, 10]) == NON_BIODEGRADABLE_COLOR


def test_out_of_bounds_boxes_are_tolerated(blank_image: np.ndarray) -> None:
    renderer = AnnotationRenderer()
    annotated = renderer.render(
        blank_image,
        [detection("apple", True, x=-30, y=-30, width=500, height=500), detection("cup", False, x=80, y=80, width=-40, height=-40)],
    )
    assert annotated.shape == blank_image.shape


def test_grayscale_input_is_rendered_in_color() -> None:
    renderer = AnnotationRenderer()
    annotated = renderer.render(np.zeros((100, 100), dtype=np.uint8), [detection("apple", True)])
    assert annotated.shape == (100, 100, 3)


@pytest.mark.parametrize("surface", [None, np.zeros((0, 0, 3), dtype=np.uint8), np.zeros((4, 4, 5), dtype=np.uint8)])
def test_missing_surface_raises_render_unavailable(surface) -> None:
    with pytest.raises(RenderUnavailable):
        AnnotationRenderer().render(surface, [detection("apple", True)])


def test_label_text_format() -> None:
    assert label_text(detection("apple", True)) == "apple (92%)"


def test_far_out_of_range_boxes_are_clipped_for_drawing(blank_image: np.ndarray) -> None:
    huge = detection("apple", True, x=-5e9, y=10, width=1e10, height=40)

    annotated = AnnotationRenderer().render(blank_image, [huge])

    assert tuple(annotated[10, 50]) == BIODEGRADABLE_COLOR
    assert huge.box.x == -5e9


def test_box_corners_keep_points_near_the_surface() -> None:
    (x1, y1), (x2, y2) = box_corners(Box(x=-5e9, y=3.6, width=1e10, height=1e12), 100, 80)

    assert (x1, y1) == (-DRAW_MARGIN, 4)
    assert (x2, y2) == (100 + DRAW_MARGIN, 80 + DRAW_MARGIN)
