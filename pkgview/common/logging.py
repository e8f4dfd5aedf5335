"""
Logging setup shared by the API process and its tests.
"""

from __future__ import annotations

import logging

from pkgview.common.settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# SQLAlchemy logs every statement at INFO.
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")

_configured = False


def configure_logging(level_name: str | None = None) -> None:
    """Install the log format on the root logger; later calls do nothing."""

    global _configured
    if _configured:
        return

    level = logging.getLevelName((level_name or get_settings().log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if level > logging.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    _configured = True
