"""JSON logging formatter with correlation ID and domain field support."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .correlation import get_log_context

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }
)


class ControllerJSONEncoder(json.JSONEncoder):
    """JSON encoder that renders classes by qualified name."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, type):
            return f"{obj.__module__}.{obj.__qualname__}"
        if isinstance(obj, BaseException):
            return f"{type(obj).__name__}: {obj}"
        return str(obj)


class StructuredJSONFormatter(logging.Formatter):
    """JSON formatter that includes correlation IDs and structured extra fields."""

    SENSITIVE_KEYS = {
        "api_key",
        "apikey",
        "private_key",
        "privatekey",
        "secret",
        "password",
        "token",
        "access_token",
        "authorization",
        "cookie",
        "credentials",
        "passphrase",
    }

    def __init__(
        self,
        *,
        ensure_ascii: bool = False,
        sort_keys: bool = False,
        timestamp_format: str = "%Y-%m-%dT%H:%M:%S.%fZ",
    ) -> None:
        super().__init__()
        self.ensure_ascii = ensure_ascii
        self.sort_keys = sort_keys
        self.timestamp_format = timestamp_format

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self._format_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName if record.funcName is not None else "<module>",
            "line": record.lineno,
        }

        correlation_context = get_log_context()
        if correlation_context:
            log_entry.update(correlation_context)

        if record.exc_info:
            log_entry["exception"] = self._format_exception(record.exc_info)

        if record.stack_info:
            log_entry["stack_trace"] = record.stack_info

        for key, value in self._extract_extra_fields(record).items():
            if key not in log_entry:
                log_entry[key] = value

        log_entry = self._redact_data(log_entry)

        try:
            return json.dumps(
                log_entry,
                ensure_ascii=self.ensure_ascii,
                sort_keys=self.sort_keys,
                cls=ControllerJSONEncoder,
            )
        except (TypeError, ValueError) as exc:
            fallback_entry = {
                "timestamp": log_entry["timestamp"],
                "level": log_entry["level"],
                "logger": log_entry["logger"],
                "message": f"JSON serialization failed: {exc}",
                "original_message": str(log_entry.get("message", "")),
            }
            return json.dumps(fallback_entry, ensure_ascii=self.ensure_ascii, default=str)

    def _redact_data(self, data: Any) -> Any:
        """Recursively redact sensitive keys in dictionaries."""
        if isinstance(data, dict):
            return {
                k: self._redact_data(v) if str(k).lower() not in self.SENSITIVE_KEYS else "[REDACTED]"
                for k, v in data.items()
            }
        elif isinstance(data, list):
            return [self._redact_data(item) for item in data]
        return data

    def _format_timestamp(self, created: float) -> str:
        dt = datetime.fromtimestamp(created, UTC)
        return dt.strftime(self.timestamp_format)

    def _format_exception(self, exc_info: Any) -> dict[str, Any]:
        if not exc_info:
            return {}

        exc_type, exc_value, _ = exc_info

        return {
            "type": exc_type.__name__ if exc_type else "Unknown",
            "message": str(exc_value) if exc_value else "",
            "module": getattr(exc_type, "__module__", "") if exc_type else "",
        }

    def _extract_extra_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        """Collect attributes added to the record through ``extra``."""
        return {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }


__all__ = ["StructuredJSONFormatter", "ControllerJSONEncoder"]
