from __future__ import annotations
import argparse
import logging
import sys
import os
from pathlib import Path
from typing import List, Optional

from PyQt6.QtWidgets import QApplication, QMessageBox
from PyQt6.QtCore import Qt

logger = logging.getLogger("pagemark")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_environment() -> None:
    """Configure the application environment."""
    project_root = Path(__file__).parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="pagemark",
        description="Highlight and annotate PDF pages, then export an annotated copy.",
    )
    parser.add_argument(
        "pdf",
        nargs="?",
        type=Path,
        help="PDF file to open on startup",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("PAGEMARK_LOG_LEVEL", "INFO"),
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging verbosity (default: INFO)",
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    """Configure the root logger."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def create_main_window():
    """Create and configure the main application window."""
    from ui.main_window import MainWindow

    window = MainWindow()
    window.setWindowTitle("PageMark")
    window.resize(1200, 900)

    return window


def handle_exception(exc_type, exc_value, exc_traceback):
    """Global exception handler."""
    # Don't handle keyboard interrupt
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback))

    # Show error dialog if QApplication exists
    app = QApplication.instance()
    if app:
        QMessageBox.critical(
            None,
            "Error",
            f"An unexpected error occurred:\n\n{exc_value}\n\nPlease check the logs for details.",
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    args = parse_arguments(argv)
    configure_logging(args.log_level)

    setup_environment()

    # Install global exception handler
    sys.excepthook = handle_exception

    # Enable high DPI scaling
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    # Create application
    app = QApplication(sys.argv[:1])
    app.setApplicationName("PageMark")
    app.setApplicationVersion("1.0.0")
    app.setOrganizationName("PageMark")

    # Set application style
    app.setStyle("Fusion")

    window = create_main_window()
    window.show()

    if args.pdf is not None:
        window.open_document(args.pdf)

    logger.info("PageMark started")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
