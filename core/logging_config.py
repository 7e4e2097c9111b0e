"""
Logging Setup

Console + daily-rotating file logging for applications embedding the pipeline.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from config.settings import LOG_BACKUP_DAYS, LOG_DIR, LOG_LEVEL, LOG_SERVICE_FILE


def setup_logging(log_dir: Optional[str] = None, level: str = LOG_LEVEL) -> None:
    """
    Setup logging with rotation.

    Logs to both console and file with rotation:
    - Daily rotation
    - Keep LOG_BACKUP_DAYS days of logs
    - Falls back to ./logs when the configured directory is not writable
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_format = logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s | %(name)s",
    )
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    file_format = logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s | %(name)s",
    )

    log_file = Path(log_dir or LOG_DIR) / LOG_SERVICE_FILE
    try:
        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(log_file),
            when="midnight",
            interval=1,
            backupCount=LOG_BACKUP_DAYS,
            encoding="utf-8",
        )
    except (PermissionError, FileNotFoundError):
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)

        fallback_log = logs_dir / LOG_SERVICE_FILE
        logger.warning(
            f"Cannot write to {log_file}, using fallback: {fallback_log}",
        )

        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(fallback_log),
            when="midnight",
            interval=1,
            backupCount=LOG_BACKUP_DAYS,
            encoding="utf-8",
        )

    file_handler.setLevel(level)
    file_handler.setFormatter(file_format)
    logger.addHandler(file_handler)
