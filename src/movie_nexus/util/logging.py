from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
import logging

_LOG_DEPTH: ContextVar[int] = ContextVar("log_depth", default=0)

LOG_FORMAT = "%(levelname)s %(indent)s%(message)s"


def _indent() -> str:
    return "  " * _LOG_DEPTH.get()


class IndentFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.indent = _indent()
        return True


@contextmanager
def log_indent() -> None:
    token = _LOG_DEPTH.set(_LOG_DEPTH.get() + 1)
    try:
        yield
    finally:
        _LOG_DEPTH.reset(token)


def configure_logging(level: int = logging.INFO) -> None:
    """Install the indenting formatter on every root handler.

    uvicorn is started without its own logging config, so its records reach
    these handlers too.
    """
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.addFilter(IndentFilter())
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
