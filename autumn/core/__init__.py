"""
Autumn Moderation Bot - Core Package
====================================

Configuration, logging and the moderation database.

DESIGN:
    Core modules expose process-wide instances:
    - get_config() returns the same Config instance
    - get_db() returns the same DatabaseManager instance
    - logger is a global TreeLogger instance

    The database lives in autumn.core.database and is imported from
    there; it depends on autumn.utils, which itself logs through this
    package.
"""

from .config import (
    Config,
    ConfigValidationError,
    EmbedColors,
    get_config,
)

from .logger import logger, TreeLogger


__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "get_config",
    # Logger
    "logger",
    "TreeLogger",
]
