"""
Sequential controller startup.

The sequencer runs discovery, initializes each controller strictly one at a
time in discovery order, registers it, and then completes the signal. Any
fatal error stops the sequence: controllers registered so far stay usable,
the registry is frozen, and the completion token is faulted with the error.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Any

from controller_init.core.report import StartupReport
from controller_init.discovery import Discovery
from controller_init.errors import (
    DuplicateRegistrationError,
    InitializationError,
    StartupError,
    handle_error,
    log_error,
)
from controller_init.logging.correlation import controller_context, correlation_context
from controller_init.registry import ControllerRegistry
from controller_init.signal import CompletionSignal
from controller_init.utilities.logging_patterns import get_logger, log_operation

logger = get_logger(__name__, component="sequencer")


class Sequencer:
    """Drive discovery, ordered initialization, registration and completion.

    Usage:
        sequencer = Sequencer(discovery, registry, signal)
        report = await sequencer.run()
        report.raise_for_failure()

    :meth:`run` executes once; later calls return the first run's report.
    """

    def __init__(
        self,
        discovery: Discovery,
        registry: ControllerRegistry,
        signal: CompletionSignal,
    ) -> None:
        self.discovery = discovery
        self.registry = registry
        self.signal = signal
        self._run_task: asyncio.Task[StartupReport] | None = None
        self._report: StartupReport | None = None

    @property
    def started(self) -> bool:
        return self._run_task is not None or self._report is not None

    @property
    def report(self) -> StartupReport | None:
        return self._report

    async def run(self) -> StartupReport:
        if self._report is not None:
            return self._report
        if self._run_task is None:
            self._run_task = asyncio.ensure_future(self._run_once())
        return await asyncio.shield(self._run_task)

    def abort(self, error: StartupError) -> StartupReport:
        """Complete with ``error`` without initializing anything.

        Used when startup cannot begin at all. A finished run keeps its
        report; a run in progress cannot be aborted.
        """
        if self._report is not None:
            return self._report
        if self._run_task is not None:
            raise StartupError("Cannot abort a startup sequence that is already running")
        with correlation_context() as startup_id:
            return self._finish(startup_id, time.perf_counter(), [], [], [], error)

    async def _run_once(self) -> StartupReport:
        with correlation_context() as startup_id:
            started_at = time.perf_counter()
            controllers: list[Any] = []
            initialized: list[type] = []
            warnings: list[str] = []
            error: StartupError | None = None

            try:
                controllers = self.discovery.discover()
                logger.info("Initializing controllers", count=len(controllers))
                for controller in controllers:
                    warning = await self._initialize_one(controller)
                    if warning:
                        warnings.append(warning)
                    initialized.append(type(controller))
            except asyncio.CancelledError:
                error = StartupError("Controller startup was cancelled")
                self._finish(startup_id, started_at, controllers, initialized, warnings, error)
                raise
            except StartupError as exc:
                error = exc
            except Exception as exc:
                wrapped = handle_error(exc, {"phase": "startup"})
                error = StartupError(wrapped.message, original_error=exc)

            return self._finish(startup_id, started_at, controllers, initialized, warnings, error)

    async def _initialize_one(self, controller: Any) -> str | None:
        controller_type = type(controller)
        name = controller_type.__name__
        if controller_type in self.registry:
            raise DuplicateRegistrationError(controller_type)

        with controller_context(controller_type):
            logger.info(f"Initializing {name}")
            try:
                with log_operation(f"initialize {name}", logger, logging.DEBUG):
                    result = controller.initialize()
                    if inspect.isawaitable(result):
                        await result
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                raise InitializationError(controller_type, exc) from exc

            self.registry.register(controller_type, controller)
            logger.info(f"Initialized {name}")

        if not getattr(controller, "initialized", True):
            message = f"{name} finished initialize() but reports initialized=False"
            logger.warning(message)
            return message
        return None

    def _finish(
        self,
        startup_id: str,
        started_at: float,
        controllers: list[Any],
        initialized: list[type],
        warnings: list[str],
        error: StartupError | None,
    ) -> StartupReport:
        self.registry.freeze()
        done = set(initialized)
        pending = tuple(type(c) for c in controllers if type(c) not in done)
        if error is not None and error.controller_type is not None:
            # the failing controller is reported as failed, not pending
            pending = tuple(cls for cls in pending if cls is not error.controller_type)
        report = StartupReport(
            startup_id=startup_id,
            initialized=tuple(initialized),
            pending=pending,
            error=error,
            duration_seconds=time.perf_counter() - started_at,
            warnings=tuple(warnings),
        )

        if error is None:
            logger.info("All controllers are initialized", count=len(initialized))
        else:
            log_error(error)
            logger.error(
                "Controller startup aborted",
                failed_type=error.context.get("controller_type"),
                registered=len(initialized),
                skipped=len(pending),
            )

        self._report = report
        self.signal.complete(report)
        return report


__all__ = ["Sequencer"]
