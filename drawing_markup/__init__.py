"""
Drawing Markup

Circle, highlight, arrow and text markup over construction drawings, with a
deterministic flattening pipeline for finding evidence.
"""

__version__ = "1.0.0"
__author__ = "CGstuff"

from .config import Config
from .errors import (
    MarkupError, InvalidAnnotationError, DuplicateAnnotationError,
    ImageLoadError, SessionStateError
)

__all__ = [
    'Config',
    'MarkupError',
    'InvalidAnnotationError',
    'DuplicateAnnotationError',
    'ImageLoadError',
    'SessionStateError',
]
