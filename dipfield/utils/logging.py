"""
Logging helpers.

The package logger carries a NullHandler, so nothing is printed unless the
caller configures logging or passes its own logger to the solvers.
"""

import logging
from typing import Optional

PACKAGE_LOGGER_NAME = 'dipfield'
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_logger(logger: Optional[logging.Logger], default: logging.Logger) -> logging.Logger:
    """Return the caller-supplied logger, or `default` when none is given."""
    return logger if logger is not None else default


def enable_console_logging(level: int = logging.INFO) -> logging.Handler:
    """
    Attach a console handler to the package logger.

    Parameters
    ----------
    level : int, optional
        Logging level for the package logger and the handler (default: INFO)

    Returns
    -------
    handler : logging.Handler
        The installed handler, so it can be removed again
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(level)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler
