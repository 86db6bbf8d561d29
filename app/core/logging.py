"""Structured logging for the signup service.

Covers:
- request_id correlation through a context variable set by the middleware
- redaction of secrets and raw email addresses in ``extra`` fields
- ``fingerprint()`` for values that must stay correlatable but unreadable
- JSON (default) or plain text output to stdout or a rotating file
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from app.core.config import LogSettings, settings

REDACTED = "[REDACTED]"

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

# Field names (case-insensitive) whose values never reach a log sink
SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        "authorization",
        "bearer",
        "token",
        "secret",
        "password",
        "admin_password",
        "app_admin_password",
        "supabase_key",
        "service_role_key",
        "apikey",
        "cookie",
        "set-cookie",
        "email",
        "raw_email",
    }
)

# Built-in LogRecord attributes; everything else on a record came from ``extra``
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


def set_request_id(request_id: str | None) -> None:
    _request_id_var.set(request_id)


def get_request_id() -> str | None:
    return _request_id_var.get()


def clear_request_id() -> None:
    _request_id_var.set(None)


def fingerprint(value: str) -> str:
    """Return a short SHA-256 fingerprint suitable for log correlation.

    Used for emails and credentials so repeated values can be matched across
    log lines without ever writing the value itself.

    Args:
        value: Raw string to fingerprint.

    Returns:
        First 16 hex characters of the SHA-256 digest.
    """

    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:16]


def redact(value: Any, sensitive_keys: Iterable[str] = SENSITIVE_KEYS_DEFAULT) -> Any:
    """Recursively replace values stored under sensitive keys.

    Args:
        value: Arbitrary value (mappings and lists are walked).
        sensitive_keys: Lowercase key names to redact.

    Returns:
        A copy of ``value`` with sensitive entries replaced by "[REDACTED]".
    """

    keys = sensitive_keys if isinstance(sensitive_keys, (set, frozenset)) else set(sensitive_keys)
    if isinstance(value, Mapping):
        return {
            k: REDACTED if str(k).lower() in keys else redact(v, keys)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(redact(v, keys) for v in value)
    return value


def extra_fields(record: LogRecord, sensitive_keys: Iterable[str] = SENSITIVE_KEYS_DEFAULT) -> dict[str, Any]:
    """Collect the ``extra`` fields of a record, redacted."""

    keys = frozenset(k.lower() for k in sensitive_keys)
    fields: dict[str, Any] = {}
    for key, value in vars(record).items():
        if key in _RECORD_ATTRS or key.startswith("_"):
            continue
        fields[key] = REDACTED if key.lower() in keys else redact(value, keys)
    return fields


class RequestIdFilter(logging.Filter):
    """Attach request_id from context when absent on the record."""

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        if getattr(record, "request_id", None) is None:
            request_id = get_request_id()
            if request_id:
                record.request_id = request_id
        return True


class SensitiveDataFilter(logging.Filter):
    """Redact sensitive ``extra`` fields on the record before any formatter runs."""

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        for key, value in extra_fields(record, self.sensitive_keys).items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, extras."""

    def __init__(
        self,
        *,
        sensitive_keys: Iterable[str] | None = None,
        ensure_ascii: bool = True,
    ) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))
        self.ensure_ascii = ensure_ascii

    def format(self, record: LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None) or get_request_id()
        if request_id:
            payload["request_id"] = request_id

        payload.update(extra_fields(record, self.sensitive_keys))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=self.ensure_ascii)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    """Return a stdout handler, or a (rotating) file handler when output=file."""

    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    file_path = Path(log_settings.file_path or "logs/app.log")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if log_settings.max_bytes:
        return RotatingFileHandler(
            file_path,
            maxBytes=log_settings.max_bytes,
            backupCount=log_settings.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(file_path, encoding="utf-8")


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Install the redacting handler on the root logger.

    Args:
        log_settings: Optional log settings; defaults to ``settings.log``.
    """

    cfg = log_settings or settings.log
    level = getattr(logging, cfg.level.upper(), logging.INFO)

    handler = _build_handler(cfg)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())

    if cfg.format.lower() == "plain":
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    else:
        handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Avoid double logging from uvicorn if it gets re-configured
    logging.getLogger("uvicorn").propagate = False
    logging.getLogger("uvicorn.access").propagate = False

    # The Supabase client logs every PostgREST call (full URL included) at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(level, logging.WARNING))
