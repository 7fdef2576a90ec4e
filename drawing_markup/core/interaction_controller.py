"""
InteractionController - drag gesture state machine for the markup canvas

idle --press--> dragging --release--> idle (+ maybe one new annotation)

The active tool and the label prompt are supplied from outside (ToolState
and a label resolver), so the controller can be driven without any UI.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from PyQt6.QtCore import QPointF

from ..config import Config
from ..models.annotation import Annotation, AnnotationKind, Extent, Point, new_annotation_id
from ..utils.coordinate_utils import CoordinateMapper
from .annotation_store import AnnotationStore

logger = logging.getLogger(__name__)

# (kind) -> label text, or None when the user gave none / cancelled
LabelResolver = Callable[[AnnotationKind], Optional[str]]


class GestureState(Enum):
    IDLE = 0
    DRAGGING = 1


@dataclass
class ToolState:
    """Per-session UI state read by the controller."""
    active_tool: AnnotationKind = AnnotationKind(Config.DEFAULT_TOOL)


def no_label(kind: AnnotationKind) -> Optional[str]:
    """Resolver that never supplies a label."""
    return None


def default_label(index: int) -> str:
    """Label given to non-text annotations created without one."""
    return Config.DEFAULT_LABEL_TEMPLATE.format(n=index)


class InteractionController:
    """
    Turns press/release pairs into annotations.

    On release:
    - text tool: the resolver must return text, otherwise the gesture is
      dropped and the store is left unchanged
    - other tools: a missing label becomes "Issue {N}" where N is the
      number of committed annotations + 1

    Zero-extent drags are kept as point markers.
    """

    def __init__(
        self,
        store: AnnotationStore,
        mapper: CoordinateMapper,
        tool_state: Optional[ToolState] = None,
        label_resolver: Optional[LabelResolver] = None,
        id_factory: Callable[[], str] = new_annotation_id
    ):
        self._store = store
        self._mapper = mapper
        self._tool_state = tool_state if tool_state is not None else ToolState()
        self._label_resolver = label_resolver or no_label
        self._id_factory = id_factory

        self._state = GestureState.IDLE
        self._start: Optional[QPointF] = None
        self._tool: Optional[AnnotationKind] = None

    # ==================== Properties ====================

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def tool_state(self) -> ToolState:
        return self._tool_state

    @property
    def drag_start(self) -> Optional[QPointF]:
        """Drag start in image pixels while dragging."""
        return QPointF(self._start) if self._start is not None else None

    def set_label_resolver(self, resolver: Optional[LabelResolver]):
        self._label_resolver = resolver or no_label

    # ==================== Gestures ====================

    def begin_gesture(self, screen_pos: QPointF) -> bool:
        """
        Start a drag at a screen position.

        Returns:
            True if dragging started, False if the position could not be
            mapped (image not loaded yet)
        """
        start = self._mapper.screen_to_image(screen_pos)
        if start is None:
            logger.debug("Gesture ignored: drawing not ready for coordinate mapping")
            return False

        self._start = start
        self._tool = self._tool_state.active_tool
        self._state = GestureState.DRAGGING
        return True

    def end_gesture(self, screen_pos: QPointF) -> Optional[Annotation]:
        """
        Finish the current drag.

        Returns:
            The committed annotation, or None if nothing was created
        """
        if self._state is not GestureState.DRAGGING:
            return None

        start, tool = self._start, self._tool
        self._reset()

        end = self._mapper.screen_to_image(screen_pos)
        if end is None:
            logger.debug("Gesture dropped: drawing no longer mapped")
            return None

        if tool is AnnotationKind.TEXT:
            label = self._label_resolver(tool)
            if not label:
                logger.debug("Text gesture abandoned (no label)")
                return None
            extent = Extent()
        else:
            label = self._label_resolver(tool) or default_label(len(self._store) + 1)
            extent = Extent(end.x() - start.x(), end.y() - start.y())

        annotation = Annotation.create(
            tool,
            Point(start.x(), start.y()),
            extent,
            label=label,
            annotation_id=self._id_factory()
        )
        self._store.append(annotation)
        return annotation

    def cancel_gesture(self):
        """Abandon a drag in progress without creating anything."""
        self._reset()

    def _reset(self):
        self._state = GestureState.IDLE
        self._start = None
        self._tool = None


__all__ = [
    'GestureState',
    'ToolState',
    'InteractionController',
    'LabelResolver',
    'no_label',
    'default_label',
]
