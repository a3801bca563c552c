import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from . import settings

LOG_FILENAME = "app.log"
MAX_LOG_BYTES = 5 * 1024 * 1024  # 5 MB
LOG_BACKUPS = 3


def setup_logger(
    name: Optional[str] = None,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    to_file: bool = True,
) -> logging.Logger:
    """
    Configures a logger for the inventory tools.

    Console output stays minimal (message only) so the ranked table and the
    store's progress lines read cleanly; the rotating file under ``log_dir``
    (``settings.LOG_DIR`` by default) keeps timestamps and levels for later
    inspection. A logger that already has handlers is returned as-is.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if to_file:
        target_dir = log_dir or settings.LOG_DIR
        target_dir.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            target_dir / LOG_FILENAME,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
