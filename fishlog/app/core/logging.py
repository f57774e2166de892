# fishlog/app/core/logging.py
import logging

from fishlog.app.core.config import LOG_LEVEL

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once. Safe to call again (basicConfig is a no-op then)."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
