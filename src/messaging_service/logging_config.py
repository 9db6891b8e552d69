"""Process-wide logging setup shared by the API and the workers."""
from __future__ import annotations

import logging
import sys

from messaging_service.api.middleware.correlation_id import correlation_id_ctx

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(correlation_id)s]: %(message)s"


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_ctx.get() or "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    # Avoid duplicate handlers when uvicorn reloads
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())

    root.setLevel(level.upper())
    root.addHandler(handler)
