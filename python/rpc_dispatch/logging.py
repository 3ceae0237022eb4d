"""Structured logging for rpc-dispatch.

This module provides structured logging functions that attach a dict of
string fields to every record. Records go to the standard library logger
named ``rpc_dispatch``; the fields are available to handlers and formatters
as ``record.fields``.

Example:
    >>> from rpc_dispatch.logging import log_info, log_error
    >>>
    >>> log_info("Dispatch started", {
    ...     "action": "add",
    ...     "request_id": "abc-123"
    ... })
    >>>
    >>> try:
    ...     dispatch()
    ... except Exception as e:
    ...     log_error(f"Dispatch failed: {e}", {
    ...         "action": "add",
    ...         "error_type": type(e).__name__
    ...     })
"""

from __future__ import annotations

import logging
from typing import Any

from .types import LogContext

LOGGER_NAME = "rpc_dispatch"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_logger = logging.getLogger(LOGGER_NAME)


def get_logger() -> logging.Logger:
    """Return the package logger."""
    return _logger


def configure_logging(level: str = "info") -> None:
    """Set the package logger level.

    Args:
        level: One of trace, debug, info, warn, error.

    Raises:
        ValueError: If the level name is unknown.
    """
    try:
        _logger.setLevel(_LEVELS[level.lower()])
    except KeyError:
        raise ValueError(f"Unknown log level: {level}") from None


def describe_exception(exc: BaseException) -> str:
    """Render an exception as ``Type: message`` for log lines.

    Falls back to the type name alone when ``str(exc)`` itself raises.
    """
    name = type(exc).__name__
    try:
        text = str(exc)
    except Exception:
        return name
    return f"{name}: {text}" if text else name


def log_error(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log an ERROR level message with structured fields.

    Use this for failures the error chain could not classify.

    Args:
        message: The log message.
        fields: Optional structured fields for context. Can be a dict
                or a LogContext instance.
    """
    _emit(logging.ERROR, message, fields)


def log_warn(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a WARN level message with structured fields.

    Use this for degraded operation, e.g. a failing event listener.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _emit(logging.WARNING, message, fields)


def log_info(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log an INFO level message with structured fields.

    Use this for lifecycle events such as registry builds.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _emit(logging.INFO, message, fields)


def log_debug(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a DEBUG level message with structured fields.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _emit(logging.DEBUG, message, fields)


def log_trace(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a TRACE level message with structured fields.

    Use this for very verbose logging, like per-parameter coercion.
    This level is typically disabled in production.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _emit(TRACE, message, fields)


def _emit(level: int, message: str, fields: dict[str, Any] | LogContext | None) -> None:
    if not _logger.isEnabledFor(level):
        return
    _logger.log(level, message, extra={"fields": _normalize_fields(fields) or {}})


def _normalize_fields(
    fields: dict[str, Any] | LogContext | None,
) -> dict[str, str] | None:
    """Normalize fields to a dict of strings.

    Args:
        fields: Input fields as dict, LogContext, or None.

    Returns:
        Dict with string values, or None if no fields.
    """
    if fields is None:
        return None

    if isinstance(fields, LogContext):
        # Drop unset context values
        return {k: str(v) for k, v in fields.model_dump().items() if v is not None}

    return {k: str(v) for k, v in fields.items()}


__all__ = [
    "LOGGER_NAME",
    "TRACE",
    "configure_logging",
    "describe_exception",
    "get_logger",
    "log_error",
    "log_warn",
    "log_info",
    "log_debug",
    "log_trace",
]
