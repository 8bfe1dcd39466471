"""Logging setup for bytebite.

Log records go to stderr; stdout belongs to the stdio transport.
"""

import logging
import sys
from typing import Optional

from bytebite.config import ServerConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("bytebite")


def setup_logging(config: Optional[ServerConfig] = None) -> logging.Logger:
    """Configure the ``bytebite`` logger.

    Safe to call more than once; the handler is installed only the first time.
    """
    level = config.log_level if config is not None else "INFO"
    logger.setLevel(level)

    if not any(getattr(h, "_bytebite", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._bytebite = True
        logger.addHandler(handler)

    return logger
