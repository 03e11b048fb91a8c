from __future__ import annotations

import logging
import os
import sys

from ..middleware.request_context import get_request_id

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] | %(message)s"
_LOGGER_NAMES = ("docflow", "openrouter")

_configured = False


class RequestIdFilter(logging.Filter):
    """Stamp each record with the id of the request being served, or ``-``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = get_request_id("-")
        return True


def configure_logging(default_level: str = "info") -> logging.Logger:
    global _configured

    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    for name in _LOGGER_NAMES:
        logging.getLogger(name).setLevel(level)

    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestIdFilter())
        for name in _LOGGER_NAMES:
            logging.getLogger(name).addHandler(handler)
        _configured = True

    return logging.getLogger("docflow")


__all__ = ["LOG_FORMAT", "RequestIdFilter", "configure_logging"]
