"""
Logging Configuration

Installs a single stream handler on the ``legis`` logger hierarchy. Modules
log through named children (``legis.embedder``, ``legis.index`` ...), so the
handler is attached once here and everything propagates up to it.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_ROOT_LOGGER_NAME = "legis"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the ``legis`` logger. Safe to call repeatedly.
    """
    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    logger.setLevel(level.upper())

    if not any(getattr(h, "_legis_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._legis_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
