"""
MarkupSession - lifecycle of one drawing markup edit

Loads the base drawing, wires pointer gestures through the coordinate
mapper into the interaction controller, re-renders after every store
change and, on save, hands the flattened PNG plus annotation list to the
evidence sink.

States:
    LOADING -> READY -> CLOSED (saved or cancelled)
    LOADING -> FAILED -> CLOSED
"""

import logging
import uuid as uuid_lib
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Tuple

from PyQt6.QtCore import QObject, QPointF, QRectF, pyqtSignal
from PyQt6.QtGui import QImage

from ..errors import SessionStateError
from ..models.annotation import Annotation, AnnotationKind
from ..models.markup_record import DrawingMarkupRecord
from ..utils.coordinate_utils import CoordinateMapper
from ..utils.image_utils import encode_png
from .annotation_store import AnnotationStore
from .compositor import render_markup
from .interaction_controller import InteractionController, LabelResolver, ToolState

logger = logging.getLogger(__name__)

# Receives the saved record; typically appends it to a finding's evidence
EvidenceSink = Callable[[DrawingMarkupRecord], Any]


class SessionState(Enum):
    LOADING = 'loading'
    READY = 'ready'
    FAILED = 'failed'
    CLOSED = 'closed'


class MarkupSession(QObject):
    """
    One markup editing session over a single base drawing.

    Usage:
        session = MarkupSession(url, "A-101 Floor Plan", loader,
                                label_resolver=ask_user, evidence_sink=storage.save_record)
        session.rendered.connect(canvas.set_image)
        session.open()
        ...
        record = session.save()
    """

    # Signals
    state_changed = pyqtSignal(object)  # SessionState
    image_ready = pyqtSignal(QImage)  # base image
    load_failed = pyqtSignal(str)  # error message
    rendered = pyqtSignal(QImage)  # flattened image after any change
    saved = pyqtSignal(object)  # DrawingMarkupRecord
    cancelled = pyqtSignal()

    def __init__(
        self,
        drawing_reference: str,
        drawing_name: str,
        loader,
        initial_annotations: Optional[Iterable] = None,
        label_resolver: Optional[LabelResolver] = None,
        evidence_sink: Optional[EvidenceSink] = None,
        finding_id: Optional[str] = None,
        tool_state: Optional[ToolState] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)

        self._reference = drawing_reference
        self._name = drawing_name
        self._loader = loader
        self._evidence_sink = evidence_sink
        self._finding_id = finding_id

        self._state = SessionState.LOADING
        self._request_id: Optional[str] = None
        self._base_image: Optional[QImage] = None
        self._flattened: Optional[QImage] = None
        self._error: Optional[str] = None

        self._store = AnnotationStore(initial_annotations, parent=self)
        self._mapper = CoordinateMapper()
        self._tool_state = tool_state if tool_state is not None else ToolState()
        self._controller = InteractionController(
            self._store,
            self._mapper,
            tool_state=self._tool_state,
            label_resolver=label_resolver
        )

        self._store.changed.connect(self._on_store_changed)
        self._loader.image_loaded.connect(self._on_image_loaded)
        self._loader.image_failed.connect(self._on_image_failed)

    # ==================== Properties ====================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def drawing_name(self) -> str:
        return self._name

    @property
    def drawing_reference(self) -> str:
        return self._reference

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def store(self) -> AnnotationStore:
        return self._store

    @property
    def controller(self) -> InteractionController:
        return self._controller

    @property
    def mapper(self) -> CoordinateMapper:
        return self._mapper

    @property
    def tool_state(self) -> ToolState:
        return self._tool_state

    @property
    def base_image(self) -> Optional[QImage]:
        return self._base_image

    @property
    def flattened_image(self) -> Optional[QImage]:
        return self._flattened

    @property
    def is_ready(self) -> bool:
        return self._state is SessionState.READY

    def annotations(self) -> Tuple[Annotation, ...]:
        return self._store.snapshot()

    # ==================== Loading ====================

    def open(self):
        """Start loading the base drawing."""
        if self._state is not SessionState.LOADING or self._request_id is not None:
            raise SessionStateError(f"Session already opened (state={self._state.value})")

        self._request_id = f"load_{uuid_lib.uuid4().hex[:8]}"
        logger.info("Opening markup session for '%s'", self._name)
        self._loader.load(self._request_id, self._reference)

    def _on_image_loaded(self, request_id: str, image: QImage):
        if request_id != self._request_id or self._state is not SessionState.LOADING:
            logger.debug("Ignoring stale image load %s", request_id)
            return

        if image.isNull():
            self._on_image_failed(request_id, "Loaded image is empty")
            return

        self._base_image = image
        self._mapper.set_natural_size(image.width(), image.height())
        if self._mapper.get_display_rect() is None:
            # Until a view reports its geometry, treat the drawing as shown 1:1
            self._mapper.set_display_rect(QRectF(0, 0, image.width(), image.height()))

        self._set_state(SessionState.READY)
        self.image_ready.emit(image)
        self._rerender()

    def _on_image_failed(self, request_id: str, message: str):
        if request_id != self._request_id or self._state is not SessionState.LOADING:
            logger.debug("Ignoring stale image failure %s", request_id)
            return

        self._error = message
        logger.warning("Cannot edit '%s': %s", self._name, message)
        self._set_state(SessionState.FAILED)
        self.load_failed.emit(message)

    # ==================== Interaction ====================

    def set_display_rect(self, rect: QRectF):
        """Report where the drawing is shown on screen."""
        self._mapper.set_display_rect(rect)

    def set_tool(self, kind):
        """Select the tool used by the next gesture."""
        self._tool_state.active_tool = AnnotationKind.parse(kind)

    def set_label_resolver(self, resolver: Optional[LabelResolver]):
        self._controller.set_label_resolver(resolver)

    def press(self, screen_pos: QPointF) -> bool:
        """Pointer pressed on the drawing."""
        if not self.is_ready:
            return False
        return self._controller.begin_gesture(screen_pos)

    def release(self, screen_pos: QPointF) -> Optional[Annotation]:
        """Pointer released; may commit an annotation."""
        if not self.is_ready:
            return None
        return self._controller.end_gesture(screen_pos)

    def undo(self) -> Optional[Annotation]:
        """Remove the most recent annotation."""
        if not self.is_ready:
            return None
        return self._store.undo_last()

    def _on_store_changed(self):
        if self.is_ready:
            self._rerender()

    def _rerender(self):
        self._flattened = render_markup(self._base_image, self._store.snapshot())
        self.rendered.emit(self._flattened)

    # ==================== Save / Cancel ====================

    def save(self) -> DrawingMarkupRecord:
        """
        Flatten, persist through the evidence sink and close the session.

        Returns:
            The immutable markup record

        Raises:
            SessionStateError: if the drawing never loaded or the session
                is already closed
        """
        if not self.is_ready:
            raise SessionStateError(f"Cannot save markup in state '{self._state.value}'")

        annotations = self._store.snapshot()
        flattened = render_markup(self._base_image, annotations)
        record = DrawingMarkupRecord(
            base_image_reference=self._reference,
            drawing_name=self._name,
            flattened_png=encode_png(flattened),
            annotations=annotations,
            finding_id=self._finding_id,
        )

        if self._evidence_sink is not None:
            self._evidence_sink(record)

        logger.info("Saved markup %s for '%s' (%d annotations)", record.id, self._name, len(annotations))
        self._flattened = flattened
        self._close()
        self.saved.emit(record)
        return record

    def cancel(self):
        """Discard everything; nothing is persisted."""
        if self._state is SessionState.CLOSED:
            return
        logger.info("Markup session for '%s' cancelled", self._name)
        self._close()
        self.cancelled.emit()

    def _close(self):
        self._controller.cancel_gesture()
        self._mapper.clear_natural_size()
        self._base_image = None
        self._request_id = None
        self._set_state(SessionState.CLOSED)

    def _set_state(self, state: SessionState):
        if state is self._state:
            return
        self._state = state
        self.state_changed.emit(state)


__all__ = ['MarkupSession', 'SessionState', 'EvidenceSink']
