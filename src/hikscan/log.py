"""Logging setup for the CLI and a silent logger for library use."""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure root logging and return the package logger."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    return logging.getLogger("hikscan")


def nop_logger() -> logging.Logger:
    """Return a logger that discards everything."""
    logger = logging.getLogger("hikscan.nop")
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    logger.propagate = False
    logger.disabled = True
    return logger
