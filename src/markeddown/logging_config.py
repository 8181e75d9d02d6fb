import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from .models.config import MarkedDownConfig

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    force: bool = False,
) -> logging.Logger:
    """
    Set up the ``markeddown`` logger.

    Diagnostics go to stderr; records do not propagate to the root logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging output
        format_string: Optional custom format string for log messages
        force: If True, reconfigure even if handlers exist

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger("markeddown")
    logger.setLevel(numeric_level)

    if force or not logger.handlers:
        logger.handlers.clear()
        formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
        if log_file:
            handlers.append(logging.FileHandler(str(log_file), encoding="utf-8"))

        for handler in handlers:
            handler.setLevel(numeric_level)
            handler.setFormatter(formatter)
            logger.addHandler(handler)

    # Root handlers never see markeddown records
    logger.propagate = False

    return logger


def setup_logging_from_config(config: "MarkedDownConfig", force: bool = False) -> logging.Logger:
    """Set up logging from the ``log_level``/``log_file`` fields of a config."""
    return setup_logging(level=config.log_level, log_file=config.log_file, force=force)
