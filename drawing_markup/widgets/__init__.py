"""Widgets for the markup editor"""

from .markup_canvas import MarkupCanvas
from .markup_toolbar import MarkupToolbar
from .markup_editor_dialog import MarkupEditorDialog

__all__ = ['MarkupCanvas', 'MarkupToolbar', 'MarkupEditorDialog']
