"""Loguru setup with per-request context (correlation id and RPC pattern)."""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from typing import Any

from loguru import logger as _logger

from .sensitive_filter import sanitize_record

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> "
    "<yellow>{extra[rpc_pattern]}</yellow> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_UNSET = "-"

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default=_UNSET)
_rpc_pattern: ContextVar[str] = ContextVar("rpc_pattern", default=_UNSET)

_logger.configure(extra={"correlation_id": _UNSET, "rpc_pattern": _UNSET})

# Chatty third-party loggers routed through loguru
_QUIET_LOGGERS = {"werkzeug": logging.INFO, "sqlalchemy.engine": logging.WARNING}


def _context() -> dict[str, Any]:
    return {"correlation_id": _correlation_id.get(), "rpc_pattern": _rpc_pattern.get()}


class _InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        _logger.bind(**_context()).opt(depth=6, exception=record.exc_info).log(
            level, record.getMessage()
        )


class ContextualLogger:
    """Proxy that binds the current request context on every call."""

    def __getattr__(self, name: str) -> Any:
        return getattr(_logger.bind(**_context()), name)


def set_correlation_id(value: str | None) -> None:
    _correlation_id.set(value or _UNSET)


def get_correlation_id() -> str:
    return _correlation_id.get()


def set_rpc_pattern(value: str | None) -> None:
    _rpc_pattern.set(value or _UNSET)


def clear_request_context() -> None:
    _correlation_id.set(_UNSET)
    _rpc_pattern.set(_UNSET)


def setup_logging(level: str | None = None, *, debug_mode: bool = False) -> None:
    level = (level or os.getenv("LOG_LEVEL") or ("DEBUG" if debug_mode else "INFO")).upper()
    sink_options: dict[str, Any] = {
        "level": level,
        "format": _FORMAT,
        "backtrace": False,
        "diagnose": False,
        "filter": sanitize_record,
    }

    _logger.remove()
    _logger.add(sys.stderr, colorize=True, **sink_options)

    log_file = os.getenv("LOG_FILE")
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        _logger.add(log_file, colorize=False, enqueue=True, encoding="utf-8", **sink_options)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


logger = ContextualLogger()

__all__ = [
    "clear_request_context",
    "get_correlation_id",
    "logger",
    "set_correlation_id",
    "set_rpc_pattern",
    "setup_logging",
]
