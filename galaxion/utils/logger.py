# galaxion/utils/logger.py
import logging
import sys
from galaxion.utils.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Library loggers that flood INFO output with per-request noise
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "sqlalchemy.engine")


def setup_logger(name: str = "galaxion", level: str | None = None) -> logging.Logger:
    """
    Configures and returns the application logger.
    Calling it again (e.g. on a hot reload) replaces the handler instead of stacking a second one.
    """
    app_logger = logging.getLogger(name)
    app_logger.setLevel(getattr(logging, (level or settings.log_level).upper(), logging.INFO))

    app_logger.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app_logger.addHandler(handler)
    # Our records stop here; the root logger would print them twice
    app_logger.propagate = False

    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)
    return app_logger


logger = setup_logger()
