"""Application entry point and setup for the Letterhunt word puzzle."""

import logging
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from letterhunt.core.config import GameConfig
from letterhunt.core.levels import LevelRepository
from letterhunt.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load content, build the main window and start the Qt event loop."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Letterhunt")
    app.setApplicationDisplayName("Letterhunt")

    config = GameConfig.from_env()
    levels = LevelRepository(document=config.content_document)
    logging.info("Loaded %d categories", len(levels.all()))

    window = MainWindow(levels=levels, config=config)
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(min(1100, geometry.width()), min(760, geometry.height()))
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
