"""Centralized logging configuration.

Sets the root level from Settings, installs a stderr handler when nothing
else (uvicorn, pytest) has, and applies a separate level to the SQLAlchemy
loggers so statement echo can be silenced independently.

Usage:
    from article_api.log_config import setup_logging
    setup_logging(settings)   # once, from create_app()
"""

import logging
import sys

from article_api.config import Settings
from article_api.middleware import request_id_var

_SQL_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "aiosqlite",
    "asyncpg",
)

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s"


class RequestIdFilter(logging.Filter):
    """Stamp each record with the id of the request being served (or ``-``)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def setup_logging(settings: Settings) -> None:
    """Configure Python logging levels from application settings."""
    root = logging.getLogger()
    root.setLevel(_parse_level(settings.LOG_LEVEL))

    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.addFilter(RequestIdFilter())
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    sql_level = _parse_level(settings.LOG_LEVEL_SQL)
    for name in _SQL_LOGGERS:
        logging.getLogger(name).setLevel(sql_level)

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s, sql=%s", settings.LOG_LEVEL, settings.LOG_LEVEL_SQL
    )


def _parse_level(raw: str) -> int:
    """Convert a level name string to a logging constant, defaulting to INFO."""
    numeric = getattr(logging, raw.upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO
