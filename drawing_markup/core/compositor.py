"""
Render compositor - flattens annotations onto a base drawing

render_markup(base, annotations) starts from a straight-alpha copy of the
base image and draws every annotation in sequence order. It never mutates
the base image and never reorders or drops annotations, so identical inputs give
pixel-identical output.

All geometry is in base-image pixels:
- circle: stroked circle centred on the drag box, radius = half its diagonal
- highlight: translucent filled rect plus stroked outline
- arrow: line origin -> origin + extent with a filled 30 degree head
- text: label drawn at origin
Non-text annotations with a label also get an outlined caption above origin.
"""

import math
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF, QSize, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QImage, QPainter, QPainterPath, QPen, QPolygonF

from ..config import Config
from ..errors import InvalidAnnotationError
from ..models.annotation import Annotation, AnnotationKind, coerce_annotation

# Straight alpha: an empty sequence reproduces the base pixel for pixel
_OUTPUT_FORMAT = QImage.Format.Format_ARGB32
_OVERLAY_FORMAT = QImage.Format.Format_ARGB32_Premultiplied


# ==================== Geometry ====================

def circle_geometry(annotation: Annotation) -> Tuple[QPointF, float]:
    """
    Centre and radius of a circle annotation.

    The drag box diagonal is the circle's diameter, so a diagonal drag
    encloses the region.

    Returns:
        (center, radius)
    """
    w = annotation.extent.width
    h = annotation.extent.height
    radius = math.sqrt(w * w + h * h) / 2.0
    center = QPointF(annotation.origin.x + w / 2.0, annotation.origin.y + h / 2.0)
    return center, radius


def arrow_head_points(
    start: QPointF,
    end: QPointF,
    head_length: float = Config.ARROW_HEAD_LENGTH,
    head_angle_deg: float = Config.ARROW_HEAD_ANGLE_DEG
) -> Optional[Tuple[QPointF, QPointF, QPointF]]:
    """
    Corners of the arrow head triangle.

    The back corners are the head-length vector rotated by +/- head_angle
    from the line's reverse direction at the tip.

    Args:
        start: Tail of the arrow
        end: Tip of the arrow
        head_length: Head length in image pixels
        head_angle_deg: Half-angle of the head

    Returns:
        (tip, back_left, back_right) or None for a zero-length arrow
    """
    dx = end.x() - start.x()
    dy = end.y() - start.y()
    if dx == 0 and dy == 0:
        return None

    angle = math.atan2(dy, dx)
    spread = math.radians(head_angle_deg)
    p1 = QPointF(
        end.x() - head_length * math.cos(angle - spread),
        end.y() - head_length * math.sin(angle - spread)
    )
    p2 = QPointF(
        end.x() - head_length * math.cos(angle + spread),
        end.y() - head_length * math.sin(angle + spread)
    )
    return QPointF(end), p1, p2


def _make_font(pixel_size: int) -> QFont:
    font = QFont(Config.FONT_FAMILY)
    font.setPixelSize(pixel_size)
    font.setBold(True)
    return font


def _stroke_pen(color: QColor) -> QPen:
    pen = QPen(color, Config.STROKE_WIDTH)
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
    return pen


# ==================== Per-kind drawing ====================

def _draw_circle(painter: QPainter, annotation: Annotation):
    center, radius = circle_geometry(annotation)
    painter.setPen(_stroke_pen(QColor(annotation.color)))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawEllipse(center, radius, radius)


def _draw_highlight(painter: QPainter, annotation: Annotation):
    rect = QRectF(
        annotation.origin.x,
        annotation.origin.y,
        annotation.extent.width,
        annotation.extent.height
    ).normalized()

    fill = QColor(annotation.color)
    fill.setAlpha(Config.HIGHLIGHT_FILL_ALPHA)
    painter.fillRect(rect, fill)

    painter.setPen(_stroke_pen(QColor(annotation.color)))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawRect(rect)


def _draw_arrow(painter: QPainter, annotation: Annotation):
    start = QPointF(annotation.origin.x, annotation.origin.y)
    end = QPointF(annotation.end.x, annotation.end.y)

    head = arrow_head_points(start, end)
    if head is None:
        # Zero-length drag: nothing to draw beyond the caption
        return

    color = QColor(annotation.color)
    painter.setPen(_stroke_pen(color))
    painter.drawLine(start, end)

    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QBrush(color))
    painter.drawPolygon(QPolygonF(list(head)))


def _draw_text(painter: QPainter, annotation: Annotation):
    if not annotation.label:
        return
    painter.setFont(_make_font(Config.TEXT_FONT_PX))
    painter.setPen(QColor(annotation.color))
    painter.drawText(QPointF(annotation.origin.x, annotation.origin.y), annotation.label)


def _draw_caption(painter: QPainter, annotation: Annotation):
    """Outlined label above the origin: stroke first, then fill."""
    path = QPainterPath()
    path.addText(
        QPointF(annotation.origin.x, annotation.origin.y - Config.CAPTION_OFFSET_Y),
        _make_font(Config.CAPTION_FONT_PX),
        annotation.label
    )

    outline = QPen(QColor(Config.CAPTION_OUTLINE_COLOR), Config.CAPTION_OUTLINE_WIDTH)
    outline.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
    painter.strokePath(path, outline)
    painter.fillPath(path, QBrush(QColor(Config.CAPTION_FILL_COLOR)))


_RENDERERS: Dict[AnnotationKind, Callable[[QPainter, Annotation], None]] = {
    AnnotationKind.CIRCLE: _draw_circle,
    AnnotationKind.HIGHLIGHT: _draw_highlight,
    AnnotationKind.ARROW: _draw_arrow,
    AnnotationKind.TEXT: _draw_text,
}


def draw_annotation(painter: QPainter, annotation: Annotation):
    """
    Draw one annotation (and its caption) with an active painter.

    Raises:
        InvalidAnnotationError: for anything that is not a known annotation
    """
    if not isinstance(annotation, Annotation):
        raise InvalidAnnotationError(f"Not an annotation: {annotation!r}")

    renderer = _RENDERERS.get(annotation.kind)
    if renderer is None:
        raise InvalidAnnotationError(f"No renderer for annotation kind {annotation.kind!r}")

    painter.save()
    try:
        renderer(painter, annotation)
        if annotation.label and annotation.kind is not AnnotationKind.TEXT:
            _draw_caption(painter, annotation)
    finally:
        painter.restore()


# ==================== Compositing ====================

def _validated(annotations: Iterable) -> List[Annotation]:
    """Coerce dict entries and reject malformed ones before painting starts."""
    result = []
    for item in annotations:
        annotation = coerce_annotation(item)
        if annotation.kind not in _RENDERERS:
            raise InvalidAnnotationError(f"No renderer for annotation kind {annotation.kind!r}")
        result.append(annotation)
    return result


def _paint_annotations(image: QImage, annotations: List[Annotation]):
    painter = QPainter(image)
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing)
        for annotation in annotations:
            draw_annotation(painter, annotation)
    finally:
        painter.end()


def render_markup(base_image: QImage, annotations: Iterable) -> QImage:
    """
    Flatten annotations onto a copy of the base image.

    Args:
        base_image: Loaded base drawing (natural size)
        annotations: Annotation sequence, insertion order

    Returns:
        New QImage the size of the base image

    Raises:
        InvalidAnnotationError: malformed annotation in the sequence
        ValueError: base image is null
    """
    if base_image is None or base_image.isNull():
        raise ValueError("Cannot render markup without a base image")

    items = _validated(annotations)

    image = base_image.convertToFormat(_OUTPUT_FORMAT).copy()
    _paint_annotations(image, items)
    return image


def render_overlay(size: QSize, annotations: Iterable) -> QImage:
    """
    Render only the annotation layer onto a transparent image.

    Args:
        size: Natural size of the drawing the annotations belong to
        annotations: Annotation sequence, insertion order

    Returns:
        Transparent QImage with annotations drawn
    """
    items = _validated(annotations)

    image = QImage(size, _OVERLAY_FORMAT)
    image.fill(QColor(0, 0, 0, 0))
    _paint_annotations(image, items)
    return image


__all__ = [
    'circle_geometry',
    'arrow_head_points',
    'draw_annotation',
    'render_markup',
    'render_overlay',
]
