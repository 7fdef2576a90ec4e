"""Services for Drawing Markup"""

from .image_loader import ImageLoader, SynchronousImageLoader
from .markup_storage import MarkupStorage, get_markup_storage
from .markup_export_service import export_record, annotation_summary_lines

__all__ = [
    'ImageLoader',
    'SynchronousImageLoader',
    'MarkupStorage',
    'get_markup_storage',
    'export_record',
    'annotation_summary_lines',
]
