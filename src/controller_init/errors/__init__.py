"""
Centralized error handling for controller startup.

Startup failures (construction, duplicate registration, initialization) are
fatal for the remaining sequence. Lookup failures are raised to callers of
the registry and are expected only when the completion signal was not
awaited first.
"""

import logging
import sys
import traceback
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:  # pragma: no cover
    from controller_init.utilities.logging_patterns import StructuredLogger

_logger: Optional["StructuredLogger"] = None


def _get_logger() -> "StructuredLogger":
    global _logger
    if _logger is None:
        from controller_init.utilities.logging_patterns import get_logger as _get_structured_logger

        _logger = _get_structured_logger(__name__, component="errors")
    return _logger


def _capture_traceback() -> str:
    """Return the active traceback or, if none, a snapshot of the current stack."""

    exc_type, exc_value, exc_tb = sys.exc_info()
    if exc_type is not None and exc_tb is not None:
        return "".join(traceback.format_exception(exc_type, exc_value, exc_tb))

    stack = traceback.format_stack()
    if not stack:
        return ""
    # Drop the last frame so the helper itself does not appear in the stack trace
    return "".join(stack[:-1])


def type_name(controller_type: type | None) -> str | None:
    if controller_type is None:
        return None
    return f"{controller_type.__module__}.{controller_type.__qualname__}"


class ControllerError(Exception):
    """Base exception class for all controller bootstrap errors"""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        recoverable: bool = True,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.recoverable = recoverable
        self.timestamp = datetime.now()
        self.traceback = _capture_traceback()
        self.original_error = original_error

    def add_context(self, **kwargs: Any) -> "ControllerError":
        """Add additional context to the error"""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "recoverable": self.recoverable,
            "timestamp": self.timestamp.isoformat(),
            "traceback": self.traceback,
        }


class StartupError(ControllerError):
    """Fatal error raised while discovering, registering or initializing controllers"""

    def __init__(
        self,
        message: str,
        controller_type: type | None = None,
        error_code: str = "STARTUP_ERROR",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code=error_code, recoverable=False, **kwargs)
        self.controller_type = controller_type
        if controller_type is not None:
            self.add_context(controller_type=type_name(controller_type))


class ConstructionError(StartupError):
    """Raised when a discovered controller type cannot be instantiated"""

    def __init__(self, controller_type: type, cause: BaseException, **kwargs: Any) -> None:
        super().__init__(
            f"Failed to construct {controller_type.__name__}: {cause}",
            controller_type=controller_type,
            error_code="CONSTRUCTION_ERROR",
            original_error=cause,
            **kwargs,
        )
        self.__cause__ = cause


class DuplicateRegistrationError(StartupError):
    """Raised when two controllers map to the same type key"""

    def __init__(self, controller_type: type, **kwargs: Any) -> None:
        super().__init__(
            f"Controller {controller_type.__name__} is already registered",
            controller_type=controller_type,
            error_code="DUPLICATE_REGISTRATION",
            **kwargs,
        )


class InitializationError(StartupError):
    """Raised when a controller's initialize operation fails"""

    def __init__(self, controller_type: type, cause: BaseException, **kwargs: Any) -> None:
        super().__init__(
            f"Failed to initialize {controller_type.__name__}: {cause}",
            controller_type=controller_type,
            error_code="INITIALIZATION_FAILURE",
            original_error=cause,
            **kwargs,
        )
        self.__cause__ = cause


class LookupFailure(ControllerError):
    """Raised by registry lookups"""

    def __init__(self, message: str, requested: type, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.requested = requested
        self.add_context(requested=type_name(requested))


class ControllerNotFoundError(LookupFailure):
    """Raised when no controller is registered for the requested type"""

    def __init__(self, requested: type, **kwargs: Any) -> None:
        super().__init__(
            f"No controller registered for {requested.__name__}",
            requested,
            error_code="NOT_FOUND",
            **kwargs,
        )


class ControllerTypeMismatchError(LookupFailure):
    """Raised when the stored instance is not an instance of the requested type"""

    def __init__(self, requested: type, actual: type, **kwargs: Any) -> None:
        super().__init__(
            f"Controller registered for {requested.__name__} is a {actual.__name__}",
            requested,
            error_code="TYPE_MISMATCH",
            **kwargs,
        )
        self.actual = actual
        self.add_context(actual=type_name(actual))


class RegistryFrozenError(ControllerError):
    """Raised when registering after population has finished"""

    def __init__(self, controller_type: type, **kwargs: Any) -> None:
        super().__init__(
            f"Registry is frozen; cannot register {controller_type.__name__}",
            error_code="REGISTRY_FROZEN",
            recoverable=False,
            **kwargs,
        )
        self.add_context(controller_type=type_name(controller_type))


# Helper functions
def handle_error(error: BaseException, context: dict[str, Any] | None = None) -> ControllerError:
    """Convert any exception to a ControllerError with context"""
    if isinstance(error, ControllerError):
        if context:
            error.add_context(**context)
        return error

    wrapped = ControllerError(
        message=str(error),
        error_code=error.__class__.__name__,
        context=context or {},
        original_error=error,
    )
    wrapped.traceback = _capture_traceback()
    return wrapped


def log_error(error: ControllerError, level: int = logging.ERROR) -> None:
    """Log an error with full context"""
    _get_logger().log(level, f"{error.error_code}: {error.message}", error_data=error.to_dict())


__all__ = [
    "ControllerError",
    "StartupError",
    "ConstructionError",
    "DuplicateRegistrationError",
    "InitializationError",
    "LookupFailure",
    "ControllerNotFoundError",
    "ControllerTypeMismatchError",
    "RegistryFrozenError",
    "handle_error",
    "log_error",
    "type_name",
]
