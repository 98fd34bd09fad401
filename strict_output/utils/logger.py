"""Logger helpers used across the package."""

from __future__ import annotations

import logging

_PACKAGE_LOGGER = "strict_output"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logging.getLogger(_PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the package namespace."""
    return logging.getLogger(name)


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a stream handler to the package logger.

    Intended for scripts and notebooks; libraries embedding the engine should
    configure logging themselves.
    """
    pkg_logger = logging.getLogger(_PACKAGE_LOGGER)
    if isinstance(level, str):
        level = level.upper()
    pkg_logger.setLevel(level)
    if not any(isinstance(h, logging.StreamHandler) for h in pkg_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        pkg_logger.addHandler(handler)
    return pkg_logger
