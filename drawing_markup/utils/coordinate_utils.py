"""
Coordinate conversion utilities for the markup canvas.

Maps pointer positions on the (possibly scaled) displayed drawing into the
drawing's natural pixel space, where all annotation geometry lives.
"""

from typing import Optional
from PyQt6.QtCore import QPointF, QRectF, QSizeF


class CoordinateMapper:
    """
    Handles conversion between screen coordinates and base-image pixels.

    image_x = (screen_x - rect.left) * natural_width / rect.width
    image_y = (screen_y - rect.top) * natural_height / rect.height

    The natural size stays unknown until the base image has loaded; until
    then every mapping is refused (returns None).
    """

    def __init__(self):
        self._display_rect: Optional[QRectF] = None
        self._natural_size: Optional[QSizeF] = None

    def set_display_rect(self, rect: Optional[QRectF]):
        """
        Set the on-screen rectangle the drawing is rendered into.

        This should be called whenever the display area changes.

        Args:
            rect: Rendered image bounds in widget coordinates
        """
        self._display_rect = QRectF(rect) if rect is not None else None

    def get_display_rect(self) -> Optional[QRectF]:
        """Get the current display rectangle."""
        return self._display_rect

    def set_natural_size(self, width: float, height: float):
        """Set the base image's natural pixel dimensions."""
        self._natural_size = QSizeF(width, height)

    def clear_natural_size(self):
        self._natural_size = None

    def get_natural_size(self) -> Optional[QSizeF]:
        return self._natural_size

    def is_ready(self) -> bool:
        """True when both the natural size and the display rect are usable."""
        if self._natural_size is None or self._display_rect is None:
            return False
        if self._natural_size.width() <= 0 or self._natural_size.height() <= 0:
            return False
        return self._display_rect.width() > 0 and self._display_rect.height() > 0

    def screen_to_image(self, screen_pos: QPointF) -> Optional[QPointF]:
        """
        Convert a screen position to base-image pixel coordinates.

        Args:
            screen_pos: Pointer position in widget coordinates

        Returns:
            Position in natural pixel space, or None if the image has not
            loaded or no display rect is set
        """
        if not self.is_ready():
            return None

        rect = self._display_rect
        x = (screen_pos.x() - rect.left()) * self._natural_size.width() / rect.width()
        y = (screen_pos.y() - rect.top()) * self._natural_size.height() / rect.height()
        return QPointF(x, y)

    def image_to_screen(self, image_pos: QPointF) -> Optional[QPointF]:
        """
        Convert base-image pixel coordinates back to screen coordinates.

        Inverse of screen_to_image using the same scale ratio.
        """
        if not self.is_ready():
            return None

        rect = self._display_rect
        x = rect.left() + image_pos.x() * rect.width() / self._natural_size.width()
        y = rect.top() + image_pos.y() * rect.height() / self._natural_size.height()
        return QPointF(x, y)

    def is_inside_rect(self, pos: QPointF) -> bool:
        """Check if a screen position is inside the displayed drawing."""
        if self._display_rect is None:
            return False
        return self._display_rect.contains(pos)

    def clamp_to_rect(self, pos: QPointF) -> QPointF:
        """
        Clamp a screen position to the displayed drawing's boundaries.

        Args:
            pos: Position to clamp

        Returns:
            Clamped position (unchanged if no rect is set)
        """
        rect = self._display_rect
        if rect is None:
            return QPointF(pos)
        x = max(rect.left(), min(rect.right(), pos.x()))
        y = max(rect.top(), min(rect.bottom(), pos.y()))
        return QPointF(x, y)

    def scale_factor(self) -> float:
        """Display pixels per image pixel (1.0 when unknown)."""
        if not self.is_ready():
            return 1.0
        return self._display_rect.width() / self._natural_size.width()


def fit_rect(natural_width: float, natural_height: float,
             available_width: float, available_height: float) -> QRectF:
    """
    Get the centered, aspect-preserving rect for showing an image.

    The image is never scaled above its natural size.

    Args:
        natural_width: Image width in pixels
        natural_height: Image height in pixels
        available_width: Widget width
        available_height: Widget height

    Returns:
        QRectF the image should be drawn into (empty if any size is zero)
    """
    if natural_width <= 0 or natural_height <= 0 or available_width <= 0 or available_height <= 0:
        return QRectF()

    scale = min(available_width / natural_width, available_height / natural_height, 1.0)
    width = natural_width * scale
    height = natural_height * scale
    left = (available_width - width) / 2.0
    top = (available_height - height) / 2.0
    return QRectF(left, top, width, height)


__all__ = ['CoordinateMapper', 'fit_rect']
