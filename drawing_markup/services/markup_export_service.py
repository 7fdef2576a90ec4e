"""
Markup Export Service - Export flattened markups for reports

Writes the flattened PNG plus a JSON sidecar with the annotation list,
builds report thumbnails and the numbered annotation summary.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from PyQt6.QtGui import QImage

from ..config import Config
from ..models.annotation import coerce_annotation
from ..models.markup_record import DrawingMarkupRecord
from ..utils.image_utils import decode_image_bytes, scale_image

logger = logging.getLogger(__name__)


def get_exports_folder() -> Path:
    """
    Get the markup export folder.

    Location: {user data dir}/exports/
    Auto-creates if it doesn't exist.
    """
    return Config.get_exports_folder()


def generate_export_filename(
    drawing_name: str,
    output_dir: Optional[Path] = None,
    existing_check: bool = True
) -> str:
    """
    Generate a unique filename for the export.

    Format: {drawing_name}_markup.png
    If file exists, adds timestamp.

    Args:
        drawing_name: Name of the marked-up drawing
        output_dir: Folder the export goes to (defaults to the exports folder)
        existing_check: Check for existing files and add timestamp if needed

    Returns:
        Filename (not full path)
    """
    base_name = f"{Config.sanitize_file_name(drawing_name)}_markup"
    extension = Config.EXPORT_IMAGE_FORMAT.lower()
    filename = f"{base_name}.{extension}"

    if existing_check:
        folder = output_dir if output_dir is not None else get_exports_folder()
        if (folder / filename).exists():
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            filename = f"{base_name}_{timestamp}.{extension}"
            counter = 1
            while (folder / filename).exists():
                filename = f"{base_name}_{timestamp}_{counter}.{extension}"
                counter += 1

    return filename


def export_record(
    record: DrawingMarkupRecord,
    output_dir: Optional[Path] = None
) -> Tuple[bool, str]:
    """
    Export a markup record's flattened PNG and annotation sidecar.

    Args:
        record: Saved markup record
        output_dir: Target folder (defaults to the exports folder)

    Returns:
        Tuple of (success: bool, message or output PNG path)
    """
    folder = Path(output_dir) if output_dir is not None else get_exports_folder()

    try:
        folder.mkdir(parents=True, exist_ok=True)

        png_path = folder / generate_export_filename(record.drawing_name, folder)
        sidecar_path = png_path.with_suffix('.json')

        png_path.write_bytes(record.flattened_png)

        sidecar = {
            'caption': record.caption,
            'image': png_path.name,
            'summary': annotation_summary_lines(record.annotations),
            **record.to_metadata(),
        }
        with open(sidecar_path, 'w', encoding='utf-8') as f:
            json.dump(sidecar, f, indent=2)

    except OSError as e:
        logger.error("Export of markup %s failed: %s", record.id, e)
        return False, f"Export failed: {e}"

    logger.info("Exported markup %s to %s", record.id, png_path)
    return True, str(png_path)


def render_thumbnail(record: DrawingMarkupRecord, max_size: int = Config.THUMBNAIL_SIZE) -> Optional[QImage]:
    """
    Scaled-down flattened image for report listings.

    Returns:
        QImage no larger than max_size on either side, or None if the
        stored PNG cannot be decoded
    """
    image = decode_image_bytes(record.flattened_png)
    if image is None:
        logger.warning("Cannot decode flattened image of markup %s", record.id)
        return None
    return scale_image(image, max_size)


def annotation_summary_lines(annotations: Iterable) -> List[str]:
    """
    Numbered annotation list as shown under a marked-up drawing.

    Annotations without a label are listed as "Annotation {n}".
    """
    lines = []
    for index, item in enumerate(annotations, start=1):
        annotation = coerce_annotation(item)
        label = annotation.label or f"Annotation {index}"
        lines.append(f"{index}. {label} ({annotation.kind.value})")
    return lines


def annotation_summary_header(annotations) -> str:
    return f"Annotations ({len(annotations)}):"


__all__ = [
    'get_exports_folder',
    'generate_export_filename',
    'export_record',
    'render_thumbnail',
    'annotation_summary_lines',
    'annotation_summary_header',
]
