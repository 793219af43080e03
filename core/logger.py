"""
Logging configuration for Crypto Quick.

Records go to a rotating ``app.log`` in the user config directory and to
stdout. Storage failures are only logged at DEBUG, so run with
``LOG_LEVEL=DEBUG`` to see them.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from config.settings import default_config_dir

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Chatty at DEBUG (one line per HTTP connection)
NOISY_LOGGERS = ("urllib3", "requests")


def level_from_env(value: Optional[str], default: int = logging.INFO) -> int:
    """Map a LOG_LEVEL value such as ``"debug"`` to a logging level."""
    if not value:
        return default
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


def _build_handlers(log_file: Path, log_level: int) -> list[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler(sys.stdout)

    handlers = [file_handler, console_handler]
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
    return handlers


def setup_logging(log_dir: Path | None = None, log_level: int = logging.INFO) -> Path:
    """
    Configure the root logger.

    Args:
        log_dir: Directory for ``app.log``. Defaults to ``<config dir>/logs``.
        log_level: Level for the root logger and both handlers.

    Returns:
        Path of the log file.
    """
    log_dir = log_dir or default_config_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "app.log"

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)
    for handler in _build_handlers(log_file, log_level):
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.INFO))

    logging.getLogger(__name__).info(
        f"Logging initialized at {logging.getLevelName(log_level)}. Log file: {log_file}"
    )
    return log_file
