"""
Logging configuration for the application.
"""
import logging
import sys

from backend.app.core.config import settings

# Third-party loggers that are chatty at DEBUG and drown out request logs
_NOISY_LOGGERS = ("python_multipart", "multipart", "sqlalchemy.engine")


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure application logging once at startup. Returns the backend logger."""
    level_val = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_val, logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logging.getLogger("backend")


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the backend namespace, e.g. get_logger("services.ledger")."""
    return logging.getLogger(f"backend.{name}")
