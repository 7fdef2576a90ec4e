"""Utility modules for Drawing Markup"""

from .coordinate_utils import CoordinateMapper, fit_rect
from .logging_config import LoggingConfig

__all__ = ['CoordinateMapper', 'fit_rect', 'LoggingConfig']
