"""Correlation ID management for tying log lines to a single startup run."""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

domain_context_var: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "domain_context", default={}
)


def get_correlation_id() -> str:
    """Get the current correlation ID from the context."""
    return correlation_id_var.get("")


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


def get_domain_context() -> dict[str, Any]:
    return domain_context_var.get({})


@contextmanager
def correlation_context(correlation_id: str | None = None, **domain_fields: Any) -> Iterator[str]:
    """Context manager for setting correlation ID and domain fields.

    Args:
        correlation_id: Optional correlation ID. If None, a new one will be generated.
        **domain_fields: Domain-specific fields to include in the context.

    Yields:
        The correlation ID in effect inside the block.
    """
    resolved = correlation_id or generate_correlation_id()
    token_correlation = correlation_id_var.set(resolved)
    token_domain = domain_context_var.set({**get_domain_context(), **domain_fields})

    try:
        yield resolved
    finally:
        correlation_id_var.reset(token_correlation)
        domain_context_var.reset(token_domain)


@contextmanager
def controller_context(controller_type: type, **additional_fields: Any) -> Iterator[None]:
    """Scope the domain context to a single controller's initialization."""
    token = domain_context_var.set(
        {
            **get_domain_context(),
            "controller": controller_type.__qualname__,
            **additional_fields,
        }
    )
    try:
        yield
    finally:
        domain_context_var.reset(token)


def get_log_context() -> dict[str, Any]:
    """Get the complete log context including correlation ID and domain fields."""
    context: dict[str, Any] = {}

    correlation_id = get_correlation_id()
    if correlation_id:
        context["correlation_id"] = correlation_id

    domain_context = get_domain_context()
    if domain_context:
        context.update(domain_context)

    return context
