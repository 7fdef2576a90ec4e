"""
Image utilities for loading, encoding and pixel access

Pattern: Image loading helpers shared by the loader, compositor and exports
"""

import base64
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PyQt6.QtCore import QBuffer, QByteArray, QIODevice, Qt
from PyQt6.QtGui import QImage

from ..config import Config
from ..errors import ImageLoadError


def decode_image_bytes(data: bytes) -> Optional[QImage]:
    """Decode encoded image bytes (PNG, JPEG, ...) into a QImage."""
    image = QImage()
    if not image.loadFromData(QByteArray(data)):
        return None
    return image


def decode_data_url(reference: str) -> bytes:
    """
    Extract the payload of a data: URL.

    Raises:
        ImageLoadError: if the URL is not a base64 data URL
    """
    header, sep, payload = reference.partition(',')
    if not sep or not header.startswith('data:'):
        raise ImageLoadError("Malformed data URL")
    if ';base64' in header:
        try:
            return base64.standard_b64decode(payload)
        except ValueError as e:
            raise ImageLoadError(f"Invalid base64 payload in data URL: {e}") from e
    return urllib.parse.unquote_to_bytes(payload)


def read_reference_bytes(reference: Union[str, Path], timeout: Optional[int] = None) -> bytes:
    """
    Read the raw bytes behind an image reference.

    Supports plain paths, file:// and http(s):// URLs, and data: URLs.

    Raises:
        ImageLoadError: when the reference cannot be read
    """
    if isinstance(reference, Path):
        reference = str(reference)

    if reference.startswith('data:'):
        return decode_data_url(reference)

    parsed = urllib.parse.urlparse(reference)
    if parsed.scheme in ('http', 'https'):
        try:
            with urllib.request.urlopen(reference, timeout=timeout or Config.IMAGE_LOAD_TIMEOUT_SEC) as response:
                return response.read()
        except OSError as e:
            raise ImageLoadError(f"Could not fetch {reference}: {e}") from e

    if parsed.scheme == 'file':
        path = Path(urllib.request.url2pathname(parsed.path))
    else:
        path = Path(reference)

    if not path.exists():
        raise ImageLoadError(f"Image not found: {path}")
    try:
        return path.read_bytes()
    except OSError as e:
        raise ImageLoadError(f"Could not read {path}: {e}") from e


def load_image_reference(reference: Union[str, Path]) -> QImage:
    """
    Load and decode the image behind a reference.

    Raises:
        ImageLoadError: unreadable reference or undecodable data
    """
    image = decode_image_bytes(read_reference_bytes(reference))
    if image is None or image.isNull():
        raise ImageLoadError(f"Could not decode image: {_short(reference)}")
    return image


def encode_image(image: QImage, fmt: str = "PNG") -> bytes:
    """Encode a QImage to bytes in the given format."""
    buffer = QBuffer()
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    ok = image.save(buffer, fmt)
    buffer.close()
    if not ok:
        raise ValueError(f"Could not encode image as {fmt}")
    return bytes(buffer.data())


def encode_png(image: QImage) -> bytes:
    return encode_image(image, "PNG")


def scale_image(
    image: QImage,
    max_size: int,
    smooth: bool = True
) -> QImage:
    """
    Scale QImage to fit within max_size

    Args:
        image: Source QImage
        max_size: Maximum dimension
        smooth: Use smooth scaling

    Returns:
        Scaled QImage
    """
    if image.width() <= max_size and image.height() <= max_size:
        return image

    transform_mode = Qt.TransformationMode.SmoothTransformation if smooth else Qt.TransformationMode.FastTransformation

    return image.scaled(
        max_size,
        max_size,
        Qt.AspectRatioMode.KeepAspectRatio,
        transform_mode
    )


def qimage_to_array(image: QImage) -> np.ndarray:
    """
    Copy a QImage into an (height, width, 4) RGBA uint8 array.

    Rows are trimmed of scanline padding.
    """
    rgba = image.convertToFormat(QImage.Format.Format_RGBA8888)
    width, height = rgba.width(), rgba.height()
    ptr = rgba.constBits()
    ptr.setsize(rgba.sizeInBytes())
    arr = np.frombuffer(ptr, dtype=np.uint8).reshape(height, rgba.bytesPerLine())
    return arr[:, :width * 4].reshape(height, width, 4).copy()


def images_identical(a: QImage, b: QImage) -> bool:
    """Pixel-exact comparison of two images (format independent)."""
    if a.size() != b.size():
        return False
    return bool(np.array_equal(qimage_to_array(a), qimage_to_array(b)))


def changed_pixel_count(a: QImage, b: QImage) -> int:
    """Number of pixels whose RGBA value differs between two same-size images."""
    if a.size() != b.size():
        raise ValueError("Images must have the same size")
    diff = np.any(qimage_to_array(a) != qimage_to_array(b), axis=2)
    return int(np.count_nonzero(diff))


def _short(reference: Union[str, Path]) -> str:
    text = str(reference)
    return text if len(text) <= 60 else text[:57] + '...'


__all__ = [
    'decode_image_bytes',
    'decode_data_url',
    'read_reference_bytes',
    'load_image_reference',
    'encode_image',
    'encode_png',
    'scale_image',
    'qimage_to_array',
    'images_identical',
    'changed_pixel_count',
]
