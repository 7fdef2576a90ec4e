"""
Drawing Markup - Main Entry Point

Opens the markup editor on one drawing and stores the result as evidence
for a finding.

Usage:
    python -m drawing_markup.main drawing.png --finding F-102 --name "A-101 Floor Plan"
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtWidgets import QApplication

from .config import Config
from .utils.logging_config import LoggingConfig


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="drawing-markup",
        description="Mark up a construction drawing with circles, highlights, arrows and text."
    )
    parser.add_argument("drawing", help="Path or URL of the drawing image")
    parser.add_argument("--finding", dest="finding_id", default=None,
                        help="Finding the markup is attached to")
    parser.add_argument("--name", dest="drawing_name", default=None,
                        help="Display name of the drawing (defaults to the file name)")
    parser.add_argument("--export", action="store_true",
                        help="Also export the flattened PNG and annotation sidecar after saving")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log debug output to the console")
    return parser.parse_args(argv)


def setup_application(argv: List[str]) -> QApplication:
    """
    Initialize and configure the Qt application

    Returns:
        Configured QApplication instance
    """
    app = QApplication(argv)
    app.setApplicationName(Config.APP_NAME)
    app.setApplicationVersion(Config.APP_VERSION)
    app.setOrganizationName(Config.APP_AUTHOR)
    return app


def main(argv: Optional[List[str]] = None):
    """
    Main entry point for Drawing Markup

    Creates the application, opens the editor dialog and exits with 0 when
    the markup was saved, 1 when it was cancelled.
    """
    args = parse_args(argv)

    # Setup logging first
    console_level = logging.DEBUG if args.verbose else logging.INFO
    LoggingConfig.setup_logging(Config.get_log_folder(), console_level=console_level)

    logger = LoggingConfig.get_logger(__name__)
    logger.info(f"Starting {Config.APP_NAME} {Config.APP_VERSION}...")
    logger.info(f"Markups: {Config.get_markups_folder()}")

    app = setup_application(sys.argv[:1])

    from .services.markup_export_service import export_record
    from .services.markup_storage import get_markup_storage
    from .widgets.markup_editor_dialog import MarkupEditorDialog

    drawing_name = args.drawing_name or Path(args.drawing).stem or args.drawing
    storage = get_markup_storage()

    dialog = MarkupEditorDialog(
        args.drawing,
        drawing_name,
        evidence_sink=storage.save_record,
        finding_id=args.finding_id
    )

    saved = []
    dialog.markup_saved.connect(saved.append)
    dialog.open_session()
    dialog.exec()

    if not saved:
        logger.info("Markup cancelled; nothing stored")
        sys.exit(1)

    record = saved[0]
    logger.info(f"Markup {record.id} stored with {len(record.annotations)} annotation(s)")

    if args.export:
        success, message = export_record(record)
        if success:
            logger.info(f"Exported to {message}")
        else:
            logger.error(message)

    app.quit()
    sys.exit(0)


if __name__ == "__main__":
    main()
