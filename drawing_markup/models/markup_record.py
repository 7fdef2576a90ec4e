"""
DrawingMarkupRecord - the persisted result of a markup session

Records are immutable: a correction is a new record, never an edit.
"""

import base64
import uuid as uuid_lib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Tuple

from .annotation import Annotation, coerce_annotation

PNG_DATA_URL_PREFIX = 'data:image/png;base64,'


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def new_record_id() -> str:
    return f"markup_{uuid_lib.uuid4().hex[:12]}"


@dataclass(frozen=True)
class DrawingMarkupRecord:
    """
    Saved markup: base reference, flattened PNG and the annotation list.

    Attributes:
        base_image_reference: Path/URL the base drawing was loaded from
        drawing_name: Human-readable name shown in the editor
        flattened_png: PNG bytes of base + annotations
        annotations: Annotation sequence in insertion order
        created_at: ISO-8601 UTC timestamp
        finding_id: Finding the record is attached to, if known
        id: Record id
    """
    base_image_reference: str
    drawing_name: str
    flattened_png: bytes
    annotations: Tuple[Annotation, ...] = ()
    created_at: str = field(default_factory=_utc_now_iso)
    finding_id: Optional[str] = None
    id: str = field(default_factory=new_record_id)

    def __post_init__(self):
        object.__setattr__(
            self, 'annotations', tuple(coerce_annotation(a) for a in self.annotations)
        )

    @property
    def caption(self) -> str:
        return f"Marked up: {self.drawing_name}"

    def flattened_data_url(self) -> str:
        """Flattened image as a PNG data URL, embeddable in reports."""
        return PNG_DATA_URL_PREFIX + base64.standard_b64encode(self.flattened_png).decode('ascii')

    def annotations_as_dicts(self) -> list:
        return [a.to_dict() for a in self.annotations]

    def to_metadata(self) -> Dict[str, Any]:
        """JSON-safe metadata (everything except the PNG bytes)."""
        return {
            'id': self.id,
            'finding_id': self.finding_id,
            'drawing_url': self.base_image_reference,
            'drawing_name': self.drawing_name,
            'created_at': self.created_at,
            'annotations': self.annotations_as_dicts(),
        }

    @classmethod
    def from_metadata(cls, data: Dict[str, Any], flattened_png: bytes) -> 'DrawingMarkupRecord':
        return cls(
            base_image_reference=data.get('drawing_url', ''),
            drawing_name=data.get('drawing_name', ''),
            flattened_png=flattened_png,
            annotations=tuple(data.get('annotations', [])),
            created_at=data.get('created_at') or _utc_now_iso(),
            finding_id=data.get('finding_id'),
            id=data.get('id') or new_record_id(),
        )

    def to_evidence(self) -> Dict[str, Any]:
        """
        Build the finding evidence entry for this record.

        Shape matches the finding's evidence list:
        type 'drawing_markup', flattened image as URL, caption and the
        structured markup block.
        """
        return {
            'type': 'drawing_markup',
            'url': self.flattened_data_url(),
            'caption': self.caption,
            'markup': {
                'drawingUrl': self.base_image_reference,
                'drawingName': self.drawing_name,
                'annotations': self.annotations_as_dicts(),
                'timestamp': self.created_at,
            },
        }


def append_evidence(evidence: Sequence[Dict[str, Any]], record: DrawingMarkupRecord) -> list:
    """Return a new evidence list with the record's entry appended."""
    return [*evidence, record.to_evidence()]


__all__ = [
    'DrawingMarkupRecord',
    'PNG_DATA_URL_PREFIX',
    'new_record_id',
    'append_evidence',
]
