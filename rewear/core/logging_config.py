"""
Logging setup - one format for the API process, Celery workers and scripts.
"""

import logging

from rewear.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = ("elastic_transport", "httpx", "httpcore", "aiosqlite")


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger. Safe to call more than once."""
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(level=level_name, format=LOG_FORMAT, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
