"""Logging helpers for the Okta admin MCP server."""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

from okta_admin_mcp.config import load_settings

AUDIT_LOGGER_NAME = "okta_admin_mcp.audit"

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_logging_configured = False
_logging_lock = threading.Lock()

_logger = logging.getLogger(__name__)


def _file_handler(path: str) -> logging.Handler | None:
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path)
    except OSError as exc:
        _logger.warning("Failed to open log file %s: %s", path, exc)
        return None
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def configure_logging() -> None:
    """Configure structured logging for the server.

    Everything goes to stderr; stdout belongs to the stdio MCP transport.
    """
    global _logging_configured

    settings = load_settings()
    level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    handlers: list[logging.Handler] = []

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    handlers.append(stream_handler)

    if settings.logging.file:
        file_handler = _file_handler(settings.logging.file)
        if file_handler is not None:
            handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
    for handler in list(audit_logger.handlers):
        audit_logger.removeHandler(handler)
        handler.close()
    audit_logger.setLevel(logging.INFO)
    if settings.audit.log_file:
        audit_handler = _file_handler(settings.audit.log_file)
        if audit_handler is not None:
            audit_logger.addHandler(audit_handler)

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    if not _logging_configured:
        with _logging_lock:
            if not _logging_configured:
                configure_logging()
    return logging.getLogger(name)
