"""
AnnotationStore - Ordered annotation sequence for one markup session

Mutated only by append and undo of the most recent entry.
"""

import logging
from typing import Iterable, Iterator, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from ..errors import DuplicateAnnotationError
from ..models.annotation import Annotation, coerce_annotation

logger = logging.getLogger(__name__)


class AnnotationStore(QObject):
    """
    Ordered list of annotations owned by a single editing session.

    Later entries render on top of earlier ones; there is no z-index.

    Usage:
        store = AnnotationStore(initial_annotations)
        store.changed.connect(session.rerender)
        store.append(annotation)
        store.undo_last()
    """

    # Signals
    changed = pyqtSignal()
    annotation_added = pyqtSignal(object)  # Annotation
    annotation_removed = pyqtSignal(object)  # Annotation

    def __init__(self, initial: Optional[Iterable] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._annotations: list = []
        self._ids: set = set()

        for item in initial or ():
            self._insert(coerce_annotation(item))

    def _insert(self, annotation: Annotation):
        if annotation.id in self._ids:
            raise DuplicateAnnotationError(f"Annotation id already in store: {annotation.id}")
        self._annotations.append(annotation)
        self._ids.add(annotation.id)

    # ==================== Mutation ====================

    def append(self, annotation: Annotation):
        """Add an annotation to the end of the sequence."""
        self._insert(annotation)
        logger.debug("Appended %s annotation %s", annotation.kind.value, annotation.id)
        self.annotation_added.emit(annotation)
        self.changed.emit()

    def undo_last(self) -> Optional[Annotation]:
        """
        Remove the most recently appended annotation.

        Returns:
            The removed annotation, or None if the store was empty
        """
        if not self._annotations:
            return None

        removed = self._annotations.pop()
        self._ids.discard(removed.id)
        logger.debug("Undid annotation %s", removed.id)
        self.annotation_removed.emit(removed)
        self.changed.emit()
        return removed

    # ==================== Access ====================

    def snapshot(self) -> Tuple[Annotation, ...]:
        """Current ordered sequence (read-only)."""
        return tuple(self._annotations)

    @property
    def can_undo(self) -> bool:
        return bool(self._annotations)

    def __len__(self) -> int:
        return len(self._annotations)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self.snapshot())

    def __contains__(self, annotation_id: object) -> bool:
        return annotation_id in self._ids


__all__ = ['AnnotationStore']
