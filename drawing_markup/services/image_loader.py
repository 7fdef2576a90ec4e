"""
ImageLoader - Async base drawing loading with QThreadPool

Pattern: Background loading with QRunnable workers, results delivered
back to the GUI thread through queued signals.
"""

import logging
import time
from typing import Optional, Set

from PyQt6.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal
from PyQt6.QtGui import QImage

from ..config import Config
from ..errors import ImageLoadError
from ..utils.image_utils import load_image_reference

logger = logging.getLogger(__name__)


class ImageLoadSignals(QObject):
    """Signals for ImageLoadTask"""

    load_complete = pyqtSignal(str, QImage, float)  # request_id, image, elapsed_ms
    load_failed = pyqtSignal(str, str)  # request_id, error_message


class ImageLoadTask(QRunnable):
    """
    Background task for fetching and decoding a base drawing

    Usage:
        task = ImageLoadTask(request_id, reference)
        threadpool.start(task)
    """

    def __init__(self, request_id: str, reference: str):
        super().__init__()
        self.request_id = request_id
        self.reference = reference
        self.signals = ImageLoadSignals()
        self.start_time = time.time()

    def run(self):
        """Execute image loading task"""
        try:
            image = load_image_reference(self.reference)
        except ImageLoadError as e:
            self.signals.load_failed.emit(self.request_id, str(e))
            return
        except Exception as e:
            self.signals.load_failed.emit(self.request_id, f"Image load error: {e}")
            return

        elapsed_ms = (time.time() - self.start_time) * 1000
        self.signals.load_complete.emit(self.request_id, image, elapsed_ms)


class ImageLoader(QObject):
    """
    Manages async base image loading with QThreadPool

    Usage:
        loader = ImageLoader()
        loader.image_loaded.connect(on_image_ready)
        loader.image_failed.connect(on_image_failed)
        loader.load("req-1", "/path/to/drawing.png")
    """

    # Signals
    image_loaded = pyqtSignal(str, QImage)  # request_id, image
    image_failed = pyqtSignal(str, str)  # request_id, error_message

    def __init__(self, parent=None, thread_pool: Optional[QThreadPool] = None):
        super().__init__(parent)

        self.thread_pool = thread_pool or QThreadPool.globalInstance()
        if self.thread_pool.maxThreadCount() < Config.IMAGE_LOAD_THREAD_COUNT:
            self.thread_pool.setMaxThreadCount(Config.IMAGE_LOAD_THREAD_COUNT)

        self.pending_requests: Set[str] = set()
        self.load_times: list = []

    def load(self, request_id: str, reference: str):
        """
        Start loading an image in the background.

        Results arrive through image_loaded / image_failed tagged with
        request_id.
        """
        self.pending_requests.add(request_id)

        task = ImageLoadTask(request_id, reference)
        task.signals.load_complete.connect(self._on_load_complete)
        task.signals.load_failed.connect(self._on_load_failed)

        self.thread_pool.start(task)

    def is_pending(self, request_id: str) -> bool:
        return request_id in self.pending_requests

    def _on_load_complete(self, request_id: str, image: QImage, elapsed_ms: float):
        """Handle successful load"""
        self.pending_requests.discard(request_id)
        self.load_times.append(elapsed_ms)
        logger.debug("Loaded drawing for %s in %.1f ms", request_id, elapsed_ms)
        self.image_loaded.emit(request_id, image)

    def _on_load_failed(self, request_id: str, error_message: str):
        """Handle failed load"""
        self.pending_requests.discard(request_id)
        self.image_failed.emit(request_id, error_message)


class SynchronousImageLoader(QObject):
    """
    Loader with the ImageLoader interface that decodes on the calling thread.

    Used for headless rendering and tests; signals fire before load()
    returns.
    """

    image_loaded = pyqtSignal(str, QImage)
    image_failed = pyqtSignal(str, str)

    def load(self, request_id: str, reference: str):
        try:
            image = load_image_reference(reference)
        except ImageLoadError as e:
            self.image_failed.emit(request_id, str(e))
            return
        self.image_loaded.emit(request_id, image)


__all__ = ['ImageLoader', 'ImageLoadTask', 'SynchronousImageLoader']
