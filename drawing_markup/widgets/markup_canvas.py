"""
MarkupCanvas - Displays the flattened drawing and captures drag gestures

The drawing is shown centred and scaled to fit (never above natural size).
Every resize reports the display rect to the session so pointer positions
map back into image pixels.
"""

from typing import Optional

from PyQt6.QtCore import QPointF, QRectF, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QCursor, QImage, QPainter, QPen
from PyQt6.QtWidgets import QSizePolicy, QWidget

from ..core.markup_session import MarkupSession
from ..utils.coordinate_utils import fit_rect


class MarkupCanvas(QWidget):
    """
    Widget showing a session's rendered image.

    Usage:
        canvas = MarkupCanvas(session)
        session.rendered.connect(canvas.set_image)
    """

    # Signals
    annotation_committed = pyqtSignal(object)  # Annotation

    BACKGROUND_COLOR = QColor("#e2e8f0")
    PREVIEW_COLOR = QColor("#4a90e2")

    def __init__(self, session: MarkupSession, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._session = session
        self._image: Optional[QImage] = None
        self._display_rect = QRectF()

        # Drag preview (screen space)
        self._drag_start: Optional[QPointF] = None
        self._drag_current: Optional[QPointF] = None

        self.setMouseTracking(False)
        self.setCursor(QCursor(Qt.CursorShape.CrossCursor))
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMinimumSize(200, 150)

    @property
    def display_rect(self) -> QRectF:
        return QRectF(self._display_rect)

    @property
    def image(self) -> Optional[QImage]:
        return self._image

    def set_image(self, image: QImage):
        """Show a newly rendered image."""
        self._image = image
        self._update_display_rect()
        self.update()

    def _update_display_rect(self):
        if self._image is None or self._image.isNull():
            self._display_rect = QRectF()
            return
        self._display_rect = fit_rect(
            self._image.width(), self._image.height(), self.width(), self.height()
        )
        self._session.set_display_rect(self._display_rect)

    # ==================== Qt Events ====================

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._update_display_rect()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), self.BACKGROUND_COLOR)

        if self._image is not None and not self._display_rect.isEmpty():
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
            painter.drawImage(self._display_rect, self._image)

            if self._drag_start is not None and self._drag_current is not None:
                pen = QPen(self.PREVIEW_COLOR, 1, Qt.PenStyle.DashLine)
                painter.setPen(pen)
                painter.setBrush(Qt.BrushStyle.NoBrush)
                painter.drawRect(QRectF(self._drag_start, self._drag_current).normalized())

        painter.end()

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        pos = event.position()
        if not self._session.mapper.is_inside_rect(pos):
            super().mousePressEvent(event)
            return

        if self._session.press(pos):
            self._drag_start = QPointF(pos)
            self._drag_current = QPointF(pos)
            event.accept()

    def mouseMoveEvent(self, event):
        if self._drag_start is not None:
            self._drag_current = self._session.mapper.clamp_to_rect(event.position())
            self.update()
            event.accept()
        else:
            super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if self._drag_start is None or event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return

        pos = self._session.mapper.clamp_to_rect(event.position())
        self._drag_start = None
        self._drag_current = None
        self.update()

        annotation = self._session.release(pos)
        if annotation is not None:
            self.annotation_committed.emit(annotation)
        event.accept()


__all__ = ['MarkupCanvas']
