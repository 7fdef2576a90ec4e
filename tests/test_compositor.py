"""Tests for flattening annotations onto a base drawing."""

import math

import pytest
from PyQt6.QtCore import QPointF, QSize
from PyQt6.QtGui import QColor, QImage

from drawing_markup.core.compositor import (
    arrow_head_points, circle_geometry, render_markup, render_overlay
)
from drawing_markup.errors import InvalidAnnotationError
from drawing_markup.models.annotation import Annotation, AnnotationKind, Extent, Point
from drawing_markup.utils.image_utils import changed_pixel_count, images_identical


# ── Geometry helpers ─────────────────────────────────────────────────

def test_circle_geometry_uses_half_diagonal(circle):
    center, radius = circle_geometry(circle)
    assert radius == pytest.approx(111.8034, abs=1e-3)
    assert (center.x(), center.y()) == (60, 110)


def test_circle_geometry_negative_drag():
    annotation = Annotation(id="c", kind="circle", origin=Point(110, 210), extent=Extent(-100, -200))
    center, radius = circle_geometry(annotation)
    assert (center.x(), center.y()) == (60, 110)
    assert radius == pytest.approx(math.sqrt(100 ** 2 + 200 ** 2) / 2)


def test_arrow_head_points_for_rightward_arrow():
    tip, p1, p2 = arrow_head_points(QPointF(0, 0), QPointF(100, 0))
    assert (tip.x(), tip.y()) == (100, 0)

    back = 100 - 20 * math.cos(math.radians(30))
    side = 20 * math.sin(math.radians(30))
    assert p1.x() == pytest.approx(back)
    assert p1.y() == pytest.approx(side)
    assert p2.x() == pytest.approx(back)
    assert p2.y() == pytest.approx(-side)


def test_arrow_head_points_zero_length():
    assert arrow_head_points(QPointF(5, 5), QPointF(5, 5)) is None


# ── render_markup ────────────────────────────────────────────────────

def test_output_has_base_size(base_image, circle):
    result = render_markup(base_image, [circle])
    assert result.size() == base_image.size()


def test_empty_sequence_reproduces_base(base_image):
    assert images_identical(render_markup(base_image, []), base_image)


def test_base_image_is_not_mutated(base_image, circle, highlight):
    original = base_image.copy()
    render_markup(base_image, [circle, highlight])
    assert images_identical(base_image, original)


def test_render_is_deterministic(base_image, circle, highlight, text_note):
    arrow = Annotation(id="a1", kind="arrow", origin=Point(200, 200), extent=Extent(-60, -90), label="Duct")
    annotations = [circle, highlight, arrow, text_note]

    first = render_markup(base_image, annotations)
    second = render_markup(base_image, list(annotations))

    assert images_identical(first, second)


def test_order_changes_output(base_image, circle, highlight):
    forward = render_markup(base_image, [circle, highlight])
    reverse = render_markup(base_image, [highlight, circle])
    assert not images_identical(forward, reverse)


def test_circle_stroke_drawn_on_radius(base_image):
    annotation = Annotation(id="c", kind="circle", origin=Point(10, 10), extent=Extent(100, 200))
    result = render_markup(base_image, [annotation])

    # Rightmost point of the circle: x = 60 + 111.8
    stroke = result.pixelColor(171, 110)
    assert stroke.red() > 200
    assert stroke.green() < 90
    assert stroke.blue() < 90

    # Centre stays untouched
    assert result.pixelColor(60, 110) == base_image.pixelColor(60, 110)


def test_highlight_fill_is_translucent(base_image, highlight):
    result = render_markup(base_image, [highlight])
    inside = result.pixelColor(100, 80)

    # Yellow at alpha 0x40 over white keeps red/green, dims blue to ~191
    assert inside.red() == 255
    assert inside.green() == 255
    assert inside.blue() == pytest.approx(191, abs=3)


def test_text_annotation_draws_label(base_image, text_note):
    result = render_markup(base_image, [text_note])
    assert changed_pixel_count(result, base_image) > 0


def test_text_annotation_without_label_draws_nothing(base_image):
    annotation = Annotation(id="t", kind="text", origin=Point(20, 40))
    assert images_identical(render_markup(base_image, [annotation]), base_image)


def test_caption_drawn_for_labelled_shapes(base_image):
    plain = Annotation(id="a", kind="arrow", origin=Point(50, 150), extent=Extent(100, 0))
    labelled = Annotation(id="a", kind="arrow", origin=Point(50, 150), extent=Extent(100, 0), label="Clash")

    without_caption = render_markup(base_image, [plain])
    with_caption = render_markup(base_image, [labelled])

    assert not images_identical(without_caption, with_caption)
    # Caption sits above the origin; the arrow line itself is at y=150
    assert changed_pixel_count(
        with_caption.copy(0, 110, 300, 35), without_caption.copy(0, 110, 300, 35)
    ) > 0


def test_zero_length_arrow_does_not_fail(base_image):
    annotation = Annotation(id="a", kind="arrow", origin=Point(100, 100))
    result = render_markup(base_image, [annotation])
    assert images_identical(result, base_image)


def test_zero_length_arrow_still_gets_caption(base_image):
    annotation = Annotation(id="a", kind="arrow", origin=Point(100, 100), label="Here")
    result = render_markup(base_image, [annotation])
    assert changed_pixel_count(result, base_image) > 0


def test_accepts_annotation_dicts(base_image, circle):
    from_objects = render_markup(base_image, [circle])
    from_dicts = render_markup(base_image, [circle.to_dict()])
    assert images_identical(from_objects, from_dicts)


def test_unknown_kind_raises(base_image, circle):
    bogus = {"id": "x", "type": "cloud", "coordinates": {"x": 0, "y": 0, "width": 5, "height": 5}}
    with pytest.raises(InvalidAnnotationError):
        render_markup(base_image, [circle, bogus])


def test_non_annotation_raises(base_image):
    with pytest.raises(InvalidAnnotationError):
        render_markup(base_image, [42])


def test_null_base_rejected(circle):
    with pytest.raises(ValueError):
        render_markup(QImage(), [circle])


def test_non_text_label_raises(base_image, circle):
    data = circle.to_dict()
    data["label"] = 5
    with pytest.raises(InvalidAnnotationError):
        render_markup(base_image, [data])


def test_translucent_base_reproduced_exactly(qapp):
    base = QImage(40, 40, QImage.Format.Format_ARGB32)
    base.fill(QColor(255, 255, 255, 0))
    for x in range(40):
        base.setPixelColor(x, 20, QColor(100, 150, 200, 10))

    result = render_markup(base, [])

    assert images_identical(result, base)
    assert result.pixelColor(5, 20) == QColor(100, 150, 200, 10)
    assert result.pixelColor(5, 5) == QColor(255, 255, 255, 0)


# ── render_overlay ───────────────────────────────────────────────────

def test_overlay_is_transparent_outside_annotations(qapp, highlight):
    overlay = render_overlay(QSize(300, 300), [highlight])
    assert overlay.size() == QSize(300, 300)
    assert overlay.pixelColor(250, 250).alpha() == 0
    assert overlay.pixelColor(100, 80).alpha() == 0x40


def test_overlay_of_nothing_is_empty(qapp):
    overlay = render_overlay(QSize(20, 10), [])
    assert all(overlay.pixelColor(x, y).alpha() == 0 for x in range(20) for y in range(10))
