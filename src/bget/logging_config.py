import logging
import sys
from typing import Optional

# Loggers of the libraries the default transfer engine is built on
TRANSPORT_LOGGERS = ("urllib3",)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    force: bool = False,
    include_transport: bool = False,
) -> logging.Logger:
    """
    Set up logging configuration for bget.

    Log records go to stderr, keeping stdout free for response bodies.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging output
        format_string: Optional custom format string for log messages
        force: If True, reconfigure even if handlers exist
        include_transport: Also route urllib3 connection logs to the same handlers

    Returns:
        Configured logger instance
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger("bget")
    logger.setLevel(numeric_level)

    # Only clear and reconfigure if forced or no handlers exist
    if force or not logger.handlers:
        logger.handlers.clear()
        formatter = logging.Formatter(format_string)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    if include_transport:
        for name in TRANSPORT_LOGGERS:
            transport_logger = logging.getLogger(name)
            transport_logger.setLevel(numeric_level)
            transport_logger.handlers = list(logger.handlers)
            transport_logger.propagate = False

    logger.propagate = False

    return logger
