"""
Application logger. Import ``log`` from here instead of calling logging.getLogger.
"""
import logging
import sys

from app.core.config import settings


def setup_logger() -> logging.Logger:
    """Configure and return the application logger."""
    logger = logging.getLogger("school-ledger")
    logger.setLevel(settings.log_level.upper())

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "%(asctime)s - %(module)s - %(levelname)s - %(message)s"
    )
    handler.setFormatter(formatter)

    if not logger.handlers:
        logger.addHandler(handler)

    return logger


log = setup_logger()
