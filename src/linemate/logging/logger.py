"""Central logger configuration.

Every module does: `logger = setup_logger(__name__)`.
"""

import logging
import sys

from src.linemate.config.settings import settings


def setup_logger(name: str = "linemate") -> logging.Logger:
    """Create and return a configured logger.

    NOTE:
    - Level comes from settings.app_log_level (falls back to INFO when unknown).
    - Handlers are attached once per logger name, so reload environments
      (uvicorn --reload) do not double-print.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    level = logging.getLevelName((settings.app_log_level or "INFO").upper())
    logger.setLevel(level if isinstance(level, int) else logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.propagate = False
    return logger
