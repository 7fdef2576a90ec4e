"""Core markup engine: store, compositor, gestures and session lifecycle"""

from .annotation_store import AnnotationStore
from .compositor import render_markup, render_overlay, draw_annotation
from .interaction_controller import InteractionController, ToolState, GestureState
from .markup_session import MarkupSession, SessionState

__all__ = [
    'AnnotationStore',
    'render_markup',
    'render_overlay',
    'draw_annotation',
    'InteractionController',
    'ToolState',
    'GestureState',
    'MarkupSession',
    'SessionState',
]
