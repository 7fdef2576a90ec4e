"""
Markup Toolbar Widget

Single-row toolbar for the drawing markup editor with:
- Tool selection (circle, highlight, arrow, text)
- Undo button
"""

from typing import Dict, Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtGui import QKeySequence
from PyQt6.QtWidgets import QButtonGroup, QFrame, QHBoxLayout, QPushButton, QWidget

from ..config import Config
from ..models.annotation import AnnotationKind


class MarkupToolbar(QWidget):
    """Tool selection and undo for the markup canvas."""

    # Signals
    tool_changed = pyqtSignal(object)  # AnnotationKind
    undo_clicked = pyqtSignal()

    # Tool definitions: (AnnotationKind, caption, tooltip, shortcut)
    TOOLS = [
        (AnnotationKind.CIRCLE, "Circle Issue", "Circle an issue (C)", "C"),
        (AnnotationKind.HIGHLIGHT, "Highlight Area", "Highlight an area (H)", "H"),
        (AnnotationKind.ARROW, "Point Arrow", "Point at something (A)", "A"),
        (AnnotationKind.TEXT, "Add Text", "Place a text note (T)", "T"),
    ]

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._tool_buttons: Dict[AnnotationKind, QPushButton] = {}
        self._current_tool = AnnotationKind(Config.DEFAULT_TOOL)

        self._setup_ui()
        self._connect_signals()

        self._tool_buttons[self._current_tool].setChecked(True)
        self.set_undo_enabled(False)

    def _setup_ui(self):
        """Build the toolbar UI."""
        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(4)

        self._tool_btn_style = """
            QPushButton { background: #2d2d2d; color: #e0e0e0; border: 1px solid #444;
                          border-radius: 3px; padding: 4px 10px; }
            QPushButton:hover { background: #3a3a3a; border-color: #555; }
            QPushButton:checked { background: #FF5722; border-color: #FF5722; }
            QPushButton:disabled { background: #252525; color: #666; border-color: #333; }
        """

        # Tool button group (exclusive selection)
        self._tool_group = QButtonGroup(self)
        self._tool_group.setExclusive(True)

        for kind, caption, tooltip, shortcut in self.TOOLS:
            btn = QPushButton(caption)
            btn.setCheckable(True)
            btn.setToolTip(tooltip)
            btn.setShortcut(QKeySequence(shortcut))
            btn.setStyleSheet(self._tool_btn_style + f"QPushButton {{ border-left: 4px solid {kind.default_color}; }}")
            self._tool_group.addButton(btn)
            self._tool_buttons[kind] = btn
            layout.addWidget(btn)

        layout.addWidget(self._create_separator())

        self._undo_btn = QPushButton("Undo")
        self._undo_btn.setToolTip("Remove the last annotation (Ctrl+Z)")
        self._undo_btn.setShortcut(QKeySequence(QKeySequence.StandardKey.Undo))
        self._undo_btn.setStyleSheet(self._tool_btn_style)
        layout.addWidget(self._undo_btn)

        layout.addStretch()

    def _create_separator(self) -> QFrame:
        """Create a vertical separator."""
        sep = QFrame()
        sep.setFrameShape(QFrame.Shape.VLine)
        sep.setStyleSheet("background: #444; max-width: 1px;")
        return sep

    def _connect_signals(self):
        for kind, btn in self._tool_buttons.items():
            btn.clicked.connect(lambda checked, k=kind: self._on_tool_clicked(k))
        self._undo_btn.clicked.connect(self.undo_clicked.emit)

    def _on_tool_clicked(self, kind: AnnotationKind):
        self._current_tool = kind
        self.tool_changed.emit(kind)

    # ==================== PUBLIC API ====================

    @property
    def current_tool(self) -> AnnotationKind:
        return self._current_tool

    def set_tool(self, kind: AnnotationKind):
        """Set the active tool programmatically."""
        if kind in self._tool_buttons:
            self._tool_buttons[kind].setChecked(True)
            self._current_tool = kind

    def tool_button(self, kind: AnnotationKind) -> QPushButton:
        return self._tool_buttons[kind]

    @property
    def undo_button(self) -> QPushButton:
        return self._undo_btn

    def set_undo_enabled(self, enabled: bool):
        """Enable/disable the undo button."""
        self._undo_btn.setEnabled(enabled)


__all__ = ['MarkupToolbar']
