"""Data models for Drawing Markup"""

from .annotation import Annotation, AnnotationKind, Extent, Point
from .markup_record import DrawingMarkupRecord, append_evidence

__all__ = [
    'Annotation',
    'AnnotationKind',
    'Extent',
    'Point',
    'DrawingMarkupRecord',
    'append_evidence',
]
