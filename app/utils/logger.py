# app/utils/logger.py
"""
Logging setup shared by every module.
Console output always; a size-rotated bed_tracker.log when LOG_DIR is set.
Each record carries the thread name so concurrent transitions can be told apart.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Library loggers that flood the output at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "uvicorn.access", "urllib3")

_configured = False


def _file_handler(level: str, formatter: logging.Formatter) -> RotatingFileHandler:
    log_dir = settings.LOG_DIR
    if not os.path.isabs(log_dir):
        project_root = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
        log_dir = os.path.join(project_root, log_dir)
    os.makedirs(log_dir, exist_ok=True)

    handler = RotatingFileHandler(
        filename=os.path.join(log_dir, "bed_tracker.log"),
        maxBytes=settings.LOG_FILE_MAX_MB * 1024 * 1024,
        backupCount=settings.LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    level = settings.LOG_LEVEL.upper()
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    if settings.LOG_DIR:
        root.addHandler(_file_handler(level, formatter))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Named logger; call once at the top of each module."""
    _configure_root_logger()
    return logging.getLogger(name)
