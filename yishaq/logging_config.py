"""JSON logging for the service.

Records are rendered by python-json-logger and enriched with the current
request id (see ``yishaq.middleware.request_id``).
"""

import logging

from pythonjsonlogger.json import JsonFormatter

from yishaq import config
from yishaq.middleware.request_id import REQUEST_ID_CTX


class RequestIdFilter(logging.Filter):
    """Attach ``request_id`` to every record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = REQUEST_ID_CTX.get()
        return True


def configure_logging(level: str | None = None) -> logging.Logger:
    logger = logging.getLogger("yishaq")
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s"))
        h.addFilter(RequestIdFilter())
        logger.addHandler(h)
    logger.setLevel((level or config.LOG_LEVEL).upper())
    return logger
