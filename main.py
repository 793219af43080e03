"""
Crypto Quick - top cryptocurrencies by market cap.
Main entry point.
"""

import logging
import os
import sys

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QApplication

from config.settings import get_settings_manager
from core.logger import level_from_env, setup_logging
from ui.main_window import MainWindow

APP_NAME = "Crypto Quick"
APP_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def main():
    setup_logging(log_level=level_from_env(os.environ.get("LOG_LEVEL")))

    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    settings_manager = get_settings_manager()
    logger.info(f"Starting {APP_NAME} {APP_VERSION} (config: {settings_manager.config_dir})")

    window = MainWindow(settings_manager)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
