"""Logging utilities for tenantscope.

This module provides:
- Logging configuration from ResolverConfig
- Length-bounded previews of logged values
- Email masking (project manager and user addresses)
- Structured logging with automatic user_id/role propagation
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any, Optional

from .config import LogLevel, ResolverConfig

if TYPE_CHECKING:
    from .models import User


EMAIL_PATTERN = re.compile(r"([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})")

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info", "taskName",
    "user_id", "role",
})


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a single-line, length-bounded preview of a value for logging.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple, set, frozenset)):
        try:
            s = json.dumps(sorted(value) if isinstance(value, (set, frozenset)) else value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


def mask_email(text: str) -> str:
    """Mask email addresses, keeping the first character and the domain.

    ``"alice@example.com"`` → ``"a***@example.com"``
    """
    if not isinstance(text, str):
        return text
    return EMAIL_PATTERN.sub(r"\1***@\2", text)


class ResolverFormatter(logging.Formatter):
    """Formatter that includes user context and optionally emits JSON.

    This formatter:
    - Adds user_id and role from log records (if available)
    - Formats logs as JSON for structured logging
    - Previews extra fields and masks email addresses
    """

    def __init__(
        self,
        json_format: bool = True,
        mask_emails: bool = True,
        service_name: Optional[str] = None,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.json_format = json_format
        self.mask_emails = mask_emails
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        user_id = getattr(record, "user_id", None)
        role = getattr(record, "role", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service_name:
            log_data["service"] = self.service_name
        if user_id:
            log_data["user_id"] = str(user_id)
        if role:
            log_data["role"] = str(role)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = safe_preview(value)

        if self.mask_emails:
            for key, value in log_data.items():
                if key not in ("timestamp", "level", "logger") and isinstance(value, str):
                    log_data[key] = mask_email(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if user_id:
            parts.append(f"user_id={log_data['user_id']}")
        if role:
            parts.append(f"role={log_data['role']}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class ResolverLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds user_id and role to every record.

    Usage:
        logger = get_resolver_logger(__name__, user=user)
        logger.info("Scope resolved")
    """

    def __init__(
        self,
        logger: logging.Logger,
        user_id: Optional[str] = None,
        role: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.user_id = user_id
        self.role = role

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        user_id = kwargs.pop("user_id", self.user_id)
        role = kwargs.pop("role", self.role)

        user = kwargs.pop("user", None)
        if user is not None:
            user_id = user_id or getattr(user, "id", None)
            role = role or getattr(user, "role", None)

        extra = kwargs.get("extra", {})
        if user_id:
            extra["user_id"] = user_id
        if role:
            extra["role"] = role
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[ResolverConfig] = None,
    json_format: Optional[bool] = None,
    mask_emails: bool = True,
) -> None:
    """Configure the root logger for an application embedding the resolver.

    Args:
        config: ResolverConfig instance (if None, loads from environment)
        json_format: Force JSON (True) or plain text (False); defaults to ``config.log_json``
        mask_emails: Whether to mask email addresses in records
    """
    if config is None:
        from .config import load_config_from_env
        config = load_config_from_env()

    log_level = getattr(logging, LogLevel(config.log_level).value, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        ResolverFormatter(
            json_format=config.log_json if json_format is None else json_format,
            mask_emails=mask_emails,
            service_name=config.service_name,
        )
    )
    root_logger.addHandler(console_handler)

    logging.getLogger("tenantscope").setLevel(log_level)


def get_resolver_logger(
    name: str,
    user: Optional["User"] = None,
    user_id: Optional[str] = None,
    role: Optional[str] = None,
) -> ResolverLoggerAdapter:
    """Get a logger adapter carrying the acting user's identity.

    Args:
        name: Logger name (typically __name__)
        user: User whose id and role are attached to every record
        user_id: Explicit user id (overrides ``user``)
        role: Explicit role (overrides ``user``)

    Example:
        logger = get_resolver_logger(__name__, user=user)
        logger.warning("Denied", extra={"tenant_id": "C1"})
    """
    if user is not None:
        user_id = user_id or user.id
        role = role or user.role
    return ResolverLoggerAdapter(logging.getLogger(name), user_id=user_id, role=role)


__all__ = [
    "ResolverFormatter",
    "ResolverLoggerAdapter",
    "get_resolver_logger",
    "mask_email",
    "safe_preview",
    "setup_logging",
]
