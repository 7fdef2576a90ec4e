"""
Annotation data model

A single visual mark placed on a drawing, in base-image pixel space.

Persisted shape (shared with the finding evidence list):
    {
        "id": "a1b2c3d4",
        "type": "circle",
        "coordinates": {"x": 10, "y": 10, "width": 100, "height": 200},
        "color": "#ff0000",
        "label": "Issue 1",
        "description": null
    }
"""

import uuid as uuid_lib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..config import Config
from ..errors import InvalidAnnotationError


class AnnotationKind(Enum):
    """Available annotation kinds."""
    CIRCLE = 'circle'
    HIGHLIGHT = 'highlight'
    ARROW = 'arrow'
    TEXT = 'text'

    @property
    def default_color(self) -> str:
        return Config.default_color_for(self.value)

    @classmethod
    def parse(cls, value: Any) -> 'AnnotationKind':
        """Resolve a kind from an enum member or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidAnnotationError(f"Unknown annotation kind: {value!r}") from None


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Extent:
    """Signed width/height of a drag; negative when moving up/left."""
    width: float = 0.0
    height: float = 0.0

    @property
    def is_zero(self) -> bool:
        return self.width == 0 and self.height == 0


def new_annotation_id() -> str:
    """Generate an opaque unique annotation id."""
    return f"ann_{uuid_lib.uuid4().hex[:12]}"


@dataclass(frozen=True)
class Annotation:
    """
    One mark on a drawing.

    Attributes:
        id: Unique within a session, never changes
        kind: circle / highlight / arrow / text, never changes
        origin: Gesture start point in base-image pixels
        extent: Signed drag size in base-image pixels, zero for text
        color: '#rrggbb', defaulted per kind
        label: Caption (or the text content for text annotations)
        description: Free text carried with the annotation, not rendered
    """
    id: str
    kind: AnnotationKind
    origin: Point
    extent: Extent = Extent()
    color: str = ''
    label: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.kind, AnnotationKind):
            object.__setattr__(self, 'kind', AnnotationKind.parse(self.kind))
        if not self.color:
            object.__setattr__(self, 'color', self.kind.default_color)

    @classmethod
    def create(
        cls,
        kind: AnnotationKind,
        origin: Point,
        extent: Extent = Extent(),
        label: Optional[str] = None,
        annotation_id: Optional[str] = None
    ) -> 'Annotation':
        """Build a fresh annotation with a generated id and the kind's colour."""
        kind = AnnotationKind.parse(kind)
        return cls(
            id=annotation_id or new_annotation_id(),
            kind=kind,
            origin=origin,
            extent=extent,
            color=kind.default_color,
            label=label,
        )

    @property
    def end(self) -> Point:
        """Gesture end point (origin + extent)."""
        return Point(self.origin.x + self.extent.width, self.origin.y + self.extent.height)

    # ==================== Serialization ====================

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.kind.value,
            'coordinates': {
                'x': self.origin.x,
                'y': self.origin.y,
                'width': self.extent.width,
                'height': self.extent.height,
            },
            'color': self.color,
            'label': self.label,
            'description': self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Annotation':
        """
        Rebuild an annotation from its persisted dict.

        Raises:
            InvalidAnnotationError: unknown type, missing id or coordinates,
                non-text label/description/color
        """
        if not isinstance(data, dict):
            raise InvalidAnnotationError(f"Annotation data must be a dict, got {type(data).__name__}")

        kind = AnnotationKind.parse(data.get('type'))
        coords = data.get('coordinates')
        annotation_id = data.get('id')
        if not annotation_id:
            raise InvalidAnnotationError("Annotation is missing an id")
        if not isinstance(coords, dict) or 'x' not in coords or 'y' not in coords:
            raise InvalidAnnotationError(f"Annotation {annotation_id} has no coordinates")

        try:
            origin = Point(float(coords['x']), float(coords['y']))
            extent = Extent(float(coords.get('width') or 0), float(coords.get('height') or 0))
        except (TypeError, ValueError) as e:
            raise InvalidAnnotationError(f"Annotation {annotation_id} has bad coordinates: {e}") from e

        for field in ('label', 'description', 'color'):
            value = data.get(field)
            if value is not None and not isinstance(value, str):
                raise InvalidAnnotationError(
                    f"Annotation {annotation_id} has a non-text {field}: {value!r}"
                )

        return cls(
            id=str(annotation_id),
            kind=kind,
            origin=origin,
            extent=extent,
            color=data.get('color') or kind.default_color,
            label=data.get('label'),
            description=data.get('description'),
        )


def coerce_annotation(value: Any) -> Annotation:
    """Accept an Annotation or its dict form."""
    if isinstance(value, Annotation):
        return value
    return Annotation.from_dict(value)


__all__ = [
    'AnnotationKind',
    'Point',
    'Extent',
    'Annotation',
    'new_annotation_id',
    'coerce_annotation',
]
