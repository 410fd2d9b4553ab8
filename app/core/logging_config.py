# -*- coding: utf-8 -*-
"""
Process logging configuration.

Routes logs by severity for correct container/platform classification:
- DEBUG, INFO, WARNING → STDOUT
- ERROR, CRITICAL → STDERR

Uses QueueHandler + QueueListener so the event loop never blocks on
stdout/stderr: only the listener thread does.

discord.py loggers are capped at WARNING; gateway heartbeats and
HTTP rate-limit chatter would otherwise dominate the output.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import Optional

NOISY_LOGGERS = ("discord", "discord.gateway", "discord.http", "discord.client", "aiohttp.access")


class MaxLevelFilter(logging.Filter):
    """Allows only records up to a specified level (inclusive)."""

    def __init__(self, max_level):
        super().__init__()
        self.max_level = max_level

    def filter(self, record):
        return record.levelno <= self.max_level


_log_listener: Optional[QueueListener] = None


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger. Must be called before any logger is used.

    Args:
        level: Root level name (DEBUG, INFO, WARNING, ...). Unknown names fall back to INFO.
    """
    global _log_listener

    if _log_listener is not None:
        _log_listener.stop()
        _log_listener = None

    root_level = logging.getLevelName(str(level).upper())
    if not isinstance(root_level, int):
        root_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(MaxLevelFilter(logging.WARNING))
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(formatter)

    log_queue = queue.Queue()
    root_logger.addHandler(QueueHandler(log_queue))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))

    _log_listener = QueueListener(
        log_queue,
        stdout_handler,
        stderr_handler,
        respect_handler_level=True,
    )
    _log_listener.start()
    atexit.register(stop_logging)


def stop_logging() -> None:
    """Flush and stop the queue listener (idempotent)."""
    global _log_listener
    if _log_listener is not None:
        _log_listener.stop()
        _log_listener = None
