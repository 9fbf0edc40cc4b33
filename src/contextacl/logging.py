"""Logging utilities for contextacl.

This module provides:
- Logging configuration from AclConfig
- Safe previews of entity ids and labels
- Structured (JSON) or plain formatting with decision context
- A logger adapter that tags records with the ACL instance name
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import AclConfig, LogLevel

# Record attributes rendered as first-class context fields
CONTEXT_FIELDS = ("acl", "user_id", "permission_id", "service_id", "group_id")

_STANDARD_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName",
    }
)


def safe_preview(value: Any, limit: int = 120) -> str:
    """Create a single-line, length-bounded preview of a value for logging.

    Entity ids are opaque and caller-supplied, so they are never logged raw.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 120)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class AclFormatter(logging.Formatter):
    """Formatter that renders decision context as JSON or plain text."""

    def __init__(self, json_format: bool = True, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context: dict[str, str] = {}
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                context[key] = safe_preview(value)
        log_data.update(context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS or key in CONTEXT_FIELDS or key.startswith("_"):
                continue
            log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            log_data["level"],
            log_data["logger"],
        ]
        parts.extend(f"{key}={value}" for key, value in context.items())
        parts.append(f": {log_data['message']}")
        text = " ".join(parts)
        if "exception" in log_data:
            text = f"{text}\n{log_data['exception']}"
        return text


class AclLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that tags every record with the ACL instance name.

    Decision context (``user_id``, ``permission_id``, ``service_id``,
    ``group_id``) may be passed as keyword arguments and lands in ``extra``.

    Usage:
        logger = get_acl_logger(__name__, acl_name="billing")
        logger.debug("Group added", group_id="editors")
    """

    def __init__(self, logger: logging.Logger, acl_name: Optional[str] = None):
        super().__init__(logger, {})
        self.acl_name = acl_name

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        if self.acl_name:
            extra.setdefault("acl", self.acl_name)
        for key in CONTEXT_FIELDS:
            if key in kwargs:
                extra[key] = kwargs.pop(key)
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(
    config: Optional[AclConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure root logging for an application embedding contextacl.

    Args:
        config: AclConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    if json_format is None:
        json_format = config.log_json

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(LogLevel(config.log_level), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(AclFormatter(json_format=json_format))
    root_logger.addHandler(console_handler)


def get_acl_logger(name: str, acl_name: Optional[str] = None) -> AclLoggerAdapter:
    """Get a logger adapter bound to an ACL instance name.

    Args:
        name: Logger name (typically __name__)
        acl_name: Instance name to include in all records

    Returns:
        AclLoggerAdapter instance
    """
    return AclLoggerAdapter(logging.getLogger(name), acl_name=acl_name)


__all__ = [
    "AclFormatter",
    "AclLoggerAdapter",
    "get_acl_logger",
    "safe_preview",
    "setup_logging",
]
