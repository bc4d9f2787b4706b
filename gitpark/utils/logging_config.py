"""
Logging configuration for gitpark.

Handlers are attached to the `gitpark` package logger rather than the
root logger, so embedding applications keep their own logging setup.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "gitpark"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the gitpark package logger.

    Calling this again replaces the handlers installed by a previous call.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional file to also write logs to.
        format_string: Custom format string.

    Returns:
        The configured package logger.
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.setLevel(getattr(logging, level.upper()))
    package_logger.propagate = False

    # python-dotenv reports unparsable .env lines at WARNING
    logging.getLogger("dotenv").setLevel(logging.ERROR)

    return package_logger
