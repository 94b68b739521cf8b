"""Centralised logging configuration for the ``controller_init`` package."""

from .correlation import controller_context, correlation_context, get_log_context
from .json_formatter import StructuredJSONFormatter
from .setup import configure_logging

__all__ = [
    "configure_logging",
    "controller_context",
    "correlation_context",
    "get_log_context",
    "StructuredJSONFormatter",
]
