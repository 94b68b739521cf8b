"""Shared helpers for the controller bootstrap package."""

from .logging_patterns import StructuredLogger, get_logger, log_operation

__all__ = [
    "StructuredLogger",
    "get_logger",
    "log_operation",
]
