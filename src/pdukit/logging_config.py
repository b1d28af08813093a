"""Logging configuration for pdukit.

All pdukit modules log through children of a single logger named "pdukit"
(e.g. ``pdukit.codec.encoder``). The library installs no handlers of its own,
so output goes wherever the application's logging setup sends it.

The codec logs schema compilation and per-record encode/decode sizes at DEBUG
level. Errors are raised, never logged.

Example:
    Trace every encode and decode call::

        import logging
        from pdukit.logging_config import configure_logging

        configure_logging(level=logging.DEBUG)

Attributes:
    PDUKIT_LOGGER_NAME: The name of the package logger ("pdukit").
"""

from __future__ import annotations

import logging
from typing import Optional

PDUKIT_LOGGER_NAME = "pdukit"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger() -> logging.Logger:
    """Return the pdukit package logger."""
    return logging.getLogger(PDUKIT_LOGGER_NAME)


def configure_logging(
    level: int = logging.INFO,
    format_string: str = DEFAULT_FORMAT,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """Configure the pdukit logger.

    A handler is only added if the logger has none besides the package's
    ``NullHandler``, so repeated calls do not duplicate output.

    Args:
        level: Logging level (e.g. ``logging.DEBUG``)
        format_string: Format string for log records
        handler: Handler to install. Defaults to a ``StreamHandler``.

    Returns:
        The configured logger
    """
    logger = get_logger()
    logger.setLevel(level)

    if not any(not isinstance(h, logging.NullHandler) for h in logger.handlers):
        if handler is None:
            handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(format_string))
        logger.addHandler(handler)

    return logger


def set_level(level: int) -> None:
    """Set the level of the pdukit logger and all of its handlers."""
    logger = get_logger()
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def _package_loggers() -> list[logging.Logger]:
    prefix = PDUKIT_LOGGER_NAME + "."
    names = [
        name
        for name in logging.root.manager.loggerDict
        if name == PDUKIT_LOGGER_NAME or name.startswith(prefix)
    ]
    return [logging.getLogger(name) for name in names]


def disable_logging() -> None:
    """Silence all pdukit logging until :func:`enable_logging` is called.

    Module loggers are children of the package logger and would still
    propagate their records, so every pdukit logger is disabled.
    """
    for logger in _package_loggers():
        logger.disabled = True


def enable_logging() -> None:
    """Re-enable pdukit logging after :func:`disable_logging`."""
    for logger in _package_loggers():
        logger.disabled = False
