"""
Logging setup for the persona engine and its shared logger instance
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from config.settings import settings


def _file_handler(formatter: logging.Formatter) -> logging.Handler:
    log_path = Path(settings.log_file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_path,
        when=settings.log_file_rotation,
        interval=1,
        backupCount=settings.log_file_retention,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def _quiet_third_party(level: int) -> None:
    # HTTP and model libraries log every request at INFO
    for name in settings.quiet_loggers:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def setup_logger(name: str = "persona-engine", level: Optional[str] = None) -> logging.Logger:
    """
    Configure and return the engine logger

    Handlers are attached once; later calls return the same logger. Output
    goes to stdout and, when LOG_TO_FILE is set, to a file rotated per
    LOG_FILE_ROTATION and kept for LOG_FILE_RETENTION intervals

    Args:
        name: Logger name (default 'persona-engine')
        level: Overrides LOG_LEVEL from settings

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    resolved = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logger.setLevel(resolved)
    formatter = logging.Formatter(fmt=settings.log_format, datefmt=settings.log_date_format)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if settings.log_to_file:
        logger.addHandler(_file_handler(formatter))

    _quiet_third_party(resolved)
    logger.propagate = False
    return logger


logger = setup_logger()
