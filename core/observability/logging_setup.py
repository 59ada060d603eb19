"""
Logging setup.

Production observability for the API process:
- One stdlib logger per module (logging.getLogger(__name__))
- A single stream handler on the root logger
- Every record carries the current request id (see api.middleware)
"""
from __future__ import annotations
from typing import Callable, Optional
import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [request_id=%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Attach the current request id to every record."""

    def __init__(self, get_request_id: Callable[[], str]):
        super().__init__()
        self._get_request_id = get_request_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = self._get_request_id()
        return True


def setup_logging(
    level: Optional[str] = None,
    get_request_id: Callable[[], str] = lambda: "-",
) -> logging.Logger:
    """Configure the root logger once. Calling it again only updates the level."""
    root = logging.getLogger()
    root.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())

    if not any(getattr(h, "_library_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestIdFilter(get_request_id))
        handler._library_handler = True
        root.addHandler(handler)

    return root
