"""
Logging setup for the admissions report tool.

Every module takes its logger from ``get_logger(__name__)``; entry points
(cli.py, web_ui.py) call ``setup_logging`` once before doing any work.

    from logging_config import LogContext, get_logger, setup_logging

    setup_logging(level="DEBUG", log_file="report.log")
    logger = get_logger(__name__)

    with LogContext(logger, "Generating report for 2026-08-01"):
        ...
"""

import logging
import sys
import time
from typing import Optional, TextIO, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("urllib3", "requests", "httpx", "gradio", "PIL", "fontTools")


def _resolve_level(level: Optional[Union[str, int]]) -> int:
    if level is None:
        from config import get_config
        level = get_config().log_level
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logging(
    level: Optional[Union[str, int]] = None,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Route all records to stderr (and optionally a file).

    Args:
        level: Level name or number; defaults to the configured LOG_LEVEL.
            Unknown names fall back to INFO.
        log_file: Also append records to this file.
        stream: Console stream (default: the current sys.stderr).

    Calling it again replaces the handlers installed by the previous call.
    """
    resolved = _resolve_level(level)

    root = logging.getLogger()
    root.setLevel(resolved)
    for old in list(root.handlers):
        root.removeHandler(old)

    root.addHandler(_handler(logging.StreamHandler(stream or sys.stderr), resolved))
    if log_file:
        root.addHandler(_handler(logging.FileHandler(log_file, encoding="utf-8"), resolved))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Time a block and log how it ended.

    Success is logged at INFO, failure at ERROR with the exception text.
    Exceptions are never swallowed. ``elapsed`` holds the duration in
    seconds once the block has exited.
    """

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.elapsed = 0.0
        self._started = 0.0

    def __enter__(self) -> "LogContext":
        self._started = time.perf_counter()
        self.logger.debug(f"{self.operation}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.elapsed = time.perf_counter() - self._started
        if exc_type is None:
            self.logger.info(f"{self.operation} done in {self.elapsed:.2f}s")
        else:
            self.logger.error(f"{self.operation} failed after {self.elapsed:.2f}s: {exc_val}")
        return False
