"""
Markup Editor Dialog - Mark up a drawing and save it as finding evidence

Composes the session, canvas and toolbar. Labels are asked for with a
QInputDialog after every gesture:
- text tool: "Enter label text:" (cancel or empty abandons the annotation)
- other tools: "Enter label (optional):" (empty gets "Issue N")
"""

import logging
from typing import Iterable, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QDialog, QHBoxLayout, QInputDialog, QLabel, QMessageBox, QPushButton, QVBoxLayout
)

from ..config import Config
from ..core.markup_session import EvidenceSink, MarkupSession, SessionState
from ..models.annotation import AnnotationKind
from ..services.image_loader import ImageLoader
from .markup_canvas import MarkupCanvas
from .markup_toolbar import MarkupToolbar

logger = logging.getLogger(__name__)


class MarkupEditorDialog(QDialog):
    """
    Modal editor for one drawing.

    Features:
    - Four markup tools with undo
    - Drawing loads in the background; tools stay disabled until ready
    - Save hands the flattened image and annotations to the evidence sink
    """

    # Emitted with the DrawingMarkupRecord after a successful save
    markup_saved = pyqtSignal(object)

    def __init__(
        self,
        drawing_reference: str,
        drawing_name: str,
        evidence_sink: Optional[EvidenceSink] = None,
        initial_annotations: Optional[Iterable] = None,
        finding_id: Optional[str] = None,
        loader=None,
        parent=None
    ):
        super().__init__(parent)

        self._drawing_name = drawing_name
        self._loader = loader if loader is not None else ImageLoader(self)

        self._session = MarkupSession(
            drawing_reference,
            drawing_name,
            self._loader,
            initial_annotations=initial_annotations,
            label_resolver=self.prompt_label,
            evidence_sink=evidence_sink,
            finding_id=finding_id,
            parent=self
        )

        self._configure_window()
        self._build_ui()
        self._connect_signals()
        self._on_state_changed(self._session.state)

    @property
    def session(self) -> MarkupSession:
        return self._session

    @property
    def canvas(self) -> MarkupCanvas:
        return self._canvas

    @property
    def toolbar(self) -> MarkupToolbar:
        return self._toolbar

    def _configure_window(self):
        """Configure window properties"""
        self.setWindowTitle(f"Markup Drawing - {self._drawing_name}")
        self.resize(Config.DEFAULT_WINDOW_WIDTH, Config.DEFAULT_WINDOW_HEIGHT)
        self.setModal(True)

    def _build_ui(self):
        """Build the dialog UI"""
        layout = QVBoxLayout(self)
        layout.setSpacing(8)
        layout.setContentsMargins(12, 12, 12, 12)

        title = QLabel(self._drawing_name)
        title.setStyleSheet("font-weight: bold; font-size: 15px;")
        layout.addWidget(title)

        self._toolbar = MarkupToolbar(self)
        layout.addWidget(self._toolbar)

        self._canvas = MarkupCanvas(self._session, self)
        layout.addWidget(self._canvas, 1)

        self._status_label = QLabel()
        self._status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._status_label)

        # Bottom row: instructions + Cancel / Save
        bottom = QHBoxLayout()
        instructions = QLabel(
            "1. Select a tool above\n"
            "2. Click and drag on the drawing to mark issues\n"
            "3. Enter labels to identify specific problems"
        )
        instructions.setStyleSheet("color: #64748b; font-size: 11px;")
        bottom.addWidget(instructions)
        bottom.addStretch()

        self._cancel_btn = QPushButton("Cancel")
        bottom.addWidget(self._cancel_btn)

        self._save_btn = QPushButton("Save Markup")
        self._save_btn.setDefault(True)
        self._save_btn.setStyleSheet(
            "QPushButton { background: #16a34a; color: white; font-weight: bold; padding: 6px 16px; }"
            "QPushButton:disabled { background: #94a3b8; }"
        )
        bottom.addWidget(self._save_btn)

        layout.addLayout(bottom)

    def _connect_signals(self):
        self._toolbar.tool_changed.connect(self._session.set_tool)
        self._toolbar.undo_clicked.connect(self._session.undo)
        self._cancel_btn.clicked.connect(self.reject)
        self._save_btn.clicked.connect(self._on_save)

        self._session.rendered.connect(self._canvas.set_image)
        self._session.state_changed.connect(self._on_state_changed)
        self._session.load_failed.connect(self._on_load_failed)
        self._session.store.changed.connect(self._update_undo)

    # ==================== Session ====================

    def open_session(self):
        """Start loading the drawing; call once after construction."""
        self._session.open()

    def prompt_label(self, kind: AnnotationKind) -> Optional[str]:
        """Label resolver: ask the user after each gesture."""
        if kind is AnnotationKind.TEXT:
            prompt = "Enter label text:"
        else:
            prompt = "Enter label (optional):"

        text, ok = QInputDialog.getText(self, "Annotation Label", prompt)
        if not ok:
            return None
        return text.strip() or None

    def _on_state_changed(self, state: SessionState):
        ready = state is SessionState.READY
        self._toolbar.setEnabled(ready)
        self._save_btn.setEnabled(ready)
        self._update_undo()

        if state is SessionState.LOADING:
            self._status_label.setText("Loading drawing...")
        elif state is SessionState.FAILED:
            self._status_label.setText(f"Could not load drawing: {self._session.error}")
        else:
            self._status_label.setText("")

    def _on_load_failed(self, message: str):
        logger.warning("Markup editor cannot load '%s': %s", self._drawing_name, message)

    def _update_undo(self):
        self._toolbar.set_undo_enabled(self._session.is_ready and self._session.store.can_undo)

    def _on_save(self):
        try:
            record = self._session.save()
        except OSError as e:
            logger.error("Saving markup for '%s' failed: %s", self._drawing_name, e)
            QMessageBox.critical(self, "Save Failed", f"Could not save markup:\n{e}")
            return

        self.markup_saved.emit(record)
        self.accept()

    def reject(self):
        self._session.cancel()
        super().reject()


__all__ = ['MarkupEditorDialog']
