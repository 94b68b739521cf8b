"""Outcome of a startup run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from controller_init.errors import StartupError, type_name


@dataclass(frozen=True)
class StartupReport:
    """Outcome of running the controller startup sequence.

    ``initialized`` lists the types registered, in initialization order.
    ``pending`` lists discovered types that were never initialized because
    the sequence aborted first; it is empty on success.
    """

    startup_id: str
    initialized: tuple[type, ...] = ()
    pending: tuple[type, ...] = ()
    error: StartupError | None = None
    duration_seconds: float = 0.0
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def failed_type(self) -> type | None:
        if self.error is None:
            return None
        return self.error.controller_type

    def raise_for_failure(self) -> None:
        """Raise the recorded startup error, if any."""
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict[str, Any]:
        return {
            "startup_id": self.startup_id,
            "succeeded": self.succeeded,
            "initialized": [type_name(cls) for cls in self.initialized],
            "pending": [type_name(cls) for cls in self.pending],
            "failed_type": type_name(self.failed_type),
            "error": self.error.to_dict() if self.error is not None else None,
            "duration_seconds": round(self.duration_seconds, 6),
            "warnings": list(self.warnings),
        }


__all__ = ["StartupReport"]
