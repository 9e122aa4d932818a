"""Application logging helpers.

One stream handler per named logger, level taken from the configured
``BOOKLEND_LOG_LEVEL``.
"""

import logging
import threading
from typing import Optional

_LOCK = threading.Lock()
_FORMAT = "[booklend] %(asctime)s %(levelname)s %(name)s %(message)s"


def get_logger(name: str = "booklend", level: Optional[str] = None) -> logging.Logger:
    """Return a configured logger.

    Args:
        name: Logger name, normally the module's ``__name__``
        level: Explicit level name; defaults to the configured level

    Returns:
        Logger with a single stream handler attached
    """
    with _LOCK:
        logger = logging.getLogger(name)
        if level is None:
            from ..config import get_config

            level = get_config().log_level
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(_FORMAT))
            logger.addHandler(handler)
        logger.propagate = False
        return logger


__all__ = ["get_logger"]
