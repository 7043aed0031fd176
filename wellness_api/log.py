"""Logging configuration for the Wellness Survey API."""
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class _AppHandler(logging.StreamHandler):
    """Marker type so repeated configuration replaces only our handler."""


def configure_logging(level: str = "INFO") -> None:
    """Install a single stdout handler on the root logger.

    Calling this more than once replaces the previous handler, so the
    application factory can be invoked repeatedly (as the tests do)
    without duplicating log lines.
    """
    handler = _AppHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    for existing in [h for h in root.handlers if isinstance(h, _AppHandler)]:
        root.removeHandler(existing)
    root.addHandler(handler)

    # SQLAlchemy echoes every statement at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
