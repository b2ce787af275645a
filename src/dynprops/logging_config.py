"""Logging configuration."""

import logging


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure the package logger with a console handler.

    Safe to call more than once; existing handlers are replaced.
    """
    logger = logging.getLogger("dynprops")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger
