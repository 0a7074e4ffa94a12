"""Logging configuration for the interpreter."""
import logging
import sys
import os
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def level_for_debug(debug_level: int) -> str:
    """
    Map the interpreter's numeric debug level onto a logging level name.

    Args:
        debug_level: Non-negative debug level from the command line (0 disables tracing).

    Returns:
        "WARNING" for 0, "INFO" for 1, "DEBUG" for 2 and above.
    """
    if debug_level <= 0:
        return "WARNING"
    if debug_level == 1:
        return "INFO"
    return "DEBUG"


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> None:
    """
    Configure logging for the interpreter.

    Diagnostics go to stderr so they never interleave with program output
    written by `log` statements or the REPL.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, logs to stderr.
    """
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    config = {
        'level': numeric_level,
        'format': LOG_FORMAT,
        'force': True,
    }

    if log_file:
        # Ensure directory exists
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        config['filename'] = log_file
    else:
        config['stream'] = sys.stderr

    logging.basicConfig(**config)

    logging.getLogger(__name__).info("Logging initialized at %s level", level.upper())


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name, typically __name__ from the calling module

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
