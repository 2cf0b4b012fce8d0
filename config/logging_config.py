# config/logging_config.py

import logging
import sys

from config.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_configured = False


def setup_logging(level: str | None = None) -> None:
    """Attach a single stdout handler to the root logger (idempotent)."""
    global _configured
    root = logging.getLogger()
    root.setLevel(level or settings.LOG_LEVEL)
    if _configured:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    # SQL echo is controlled by settings.DEBUG, keep the pool quiet otherwise
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    _configured = True
