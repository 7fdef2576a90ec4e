"""
Global configuration for Drawing Markup

Rendering constants, per-kind defaults and storage locations.
"""

import os
import sys
from pathlib import Path
from typing import Final


class Config:
    """Central configuration class for all application settings"""

    # Application metadata
    APP_NAME: Final[str] = "Drawing Markup"
    APP_VERSION: Final[str] = "1.0.0"
    APP_AUTHOR: Final[str] = "CGstuff"

    # Paths
    APP_ROOT: Final[Path] = Path(__file__).parent

    # Environment override for the data directory
    HOME_ENV_VAR: Final[str] = "DRAWING_MARKUP_HOME"

    # Default colour per annotation kind (fixed at creation)
    KIND_COLORS: Final[dict] = {
        'circle': '#ff0000',
        'highlight': '#ffff00',
        'arrow': '#ff6600',
        'text': '#000000',
    }

    # Compositor settings (all in base-image pixel units)
    STROKE_WIDTH: Final[int] = 4
    HIGHLIGHT_FILL_ALPHA: Final[int] = 0x40
    ARROW_HEAD_LENGTH: Final[float] = 20.0
    ARROW_HEAD_ANGLE_DEG: Final[float] = 30.0
    FONT_FAMILY: Final[str] = "Arial"
    TEXT_FONT_PX: Final[int] = 24
    CAPTION_FONT_PX: Final[int] = 20
    CAPTION_OFFSET_Y: Final[int] = 10
    CAPTION_OUTLINE_WIDTH: Final[int] = 3
    CAPTION_FILL_COLOR: Final[str] = '#ffffff'
    CAPTION_OUTLINE_COLOR: Final[str] = '#000000'

    # Interaction
    DEFAULT_TOOL: Final[str] = 'circle'
    DEFAULT_LABEL_TEMPLATE: Final[str] = "Issue {n}"

    # Image loading
    IMAGE_LOAD_THREAD_COUNT: Final[int] = 2
    IMAGE_LOAD_TIMEOUT_SEC: Final[int] = 30

    # Export settings
    EXPORT_IMAGE_FORMAT: Final[str] = "PNG"
    THUMBNAIL_SIZE: Final[int] = 320

    # Window settings
    DEFAULT_WINDOW_WIDTH: Final[int] = 1280
    DEFAULT_WINDOW_HEIGHT: Final[int] = 860

    # Storage structure
    MARKUPS_FOLDER_NAME: Final[str] = "markups"
    EXPORTS_FOLDER_NAME: Final[str] = "exports"
    LOGS_FOLDER_NAME: Final[str] = "logs"

    @classmethod
    def get_user_data_dir(cls) -> Path:
        """
        Get user data directory.

        Uses system AppData/Local (Windows) or .local/share (Linux).
        DRAWING_MARKUP_HOME wins over everything, then a 'portable.txt'
        flag next to the package keeps data in a local folder.
        """
        override = os.environ.get(cls.HOME_ENV_VAR)
        portable_flag = cls.APP_ROOT.parent / 'portable.txt'

        if override:
            user_dir = Path(override)
        elif portable_flag.exists():
            user_dir = cls.APP_ROOT.parent / 'data'
        elif sys.platform == 'win32':
            base_path = Path(os.environ.get('LOCALAPPDATA', os.path.expanduser('~')))
            user_dir = base_path / 'DrawingMarkup'
        elif sys.platform == 'darwin':
            user_dir = Path.home() / 'Library' / 'Application Support' / 'DrawingMarkup'
        else:
            user_dir = Path.home() / '.local' / 'share' / 'DrawingMarkup'

        user_dir.mkdir(parents=True, exist_ok=True)
        return user_dir

    @classmethod
    def get_markups_folder(cls) -> Path:
        """Get the folder holding persisted markup records."""
        folder = cls.get_user_data_dir() / cls.MARKUPS_FOLDER_NAME
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    @classmethod
    def get_exports_folder(cls) -> Path:
        """Get the folder for exported PNG + sidecar files."""
        folder = cls.get_user_data_dir() / cls.EXPORTS_FOLDER_NAME
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    @classmethod
    def get_log_folder(cls) -> Path:
        """Get the log folder path."""
        return cls.get_user_data_dir() / cls.LOGS_FOLDER_NAME

    @classmethod
    def default_color_for(cls, kind: str) -> str:
        """Default colour for an annotation kind name."""
        return cls.KIND_COLORS[kind]

    @classmethod
    def sanitize_file_name(cls, name: str) -> str:
        """
        Sanitize a drawing name for use in file names.

        Args:
            name: Human-readable drawing name

        Returns:
            Safe file name stem
        """
        import re
        safe = re.sub(r'[<>:"/\\|?*]', '_', name)
        safe = safe.strip(' .')
        safe = re.sub(r'_+', '_', safe)
        return safe[:50] or 'drawing'


__all__ = ['Config']
