"""
Application configuration package
"""

from .settings import Settings, settings, CONFIG_DIR
from .logging_config import logger, setup_logger

__all__ = [
    "Settings",
    "settings",
    "CONFIG_DIR",
    "logger",
    "setup_logger"
]
