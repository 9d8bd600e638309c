"""
Logging configuration and setup.
"""
import logging
from typing import Optional

from todokeep.config import Settings, get_settings

# -v raises the configured level to INFO, -vv to DEBUG
_VERBOSITY_LEVELS = [logging.INFO, logging.DEBUG]


def resolve_log_level(settings: Settings, verbosity: int = 0) -> int:
    """Combine the configured log level with command-line verbosity."""
    level = logging.getLevelNamesMapping()[settings.log_level]
    if verbosity > 0:
        level = min(level, _VERBOSITY_LEVELS[min(verbosity, len(_VERBOSITY_LEVELS)) - 1])
    return level


def setup_logging(verbosity: int = 0, settings: Optional[Settings] = None) -> None:
    """Configure root logging to stderr."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=resolve_log_level(settings, verbosity),
        format=settings.log_format,
        force=True,
    )
