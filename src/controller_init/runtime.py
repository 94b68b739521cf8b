"""
Process-wide bootstrap entry point.

The host calls :func:`startup_hook` once, before any dependent logic runs.
Consumers then use :func:`wait_for_controllers` (or subscribe with
:func:`on_controllers_initialized`) before calling :func:`get_controller`.
"""

from __future__ import annotations

import asyncio
from typing import TypeVar

from controller_init.app.container import ApplicationContainer
from controller_init.core.protocols import HostEnvironment
from controller_init.core.report import StartupReport
from controller_init.errors import ControllerError, StartupError
from controller_init.logging.setup import configure_logging
from controller_init.settings import get_settings
from controller_init.signal import Subscriber
from controller_init.utilities.logging_patterns import get_logger

logger = get_logger(__name__, component="runtime")

T = TypeVar("T")

_container: ApplicationContainer | None = None
_host: HostEnvironment | None = None
_hook_fired = False
_startup_task: asyncio.Task[StartupReport] | None = None


def set_host(host: HostEnvironment) -> None:
    """Register the host environment; must happen before the container exists."""
    global _host
    if _container is not None:
        raise ControllerError(
            "Host environment must be set before the container is created",
            error_code="CONFIG_ERROR",
            recoverable=False,
        )
    _host = host


def get_container() -> ApplicationContainer:
    global _container
    if _container is None:
        _container = ApplicationContainer(get_settings(), host=_host)
    return _container


def startup_hook() -> None:
    """Run the controller startup sequence once per process.

    Without a running event loop the sequence runs to completion before this
    returns. Inside a running loop it is scheduled as a task and consumers
    await the completion token. Failures are published through the token and
    the broadcast, never raised from here.
    """
    global _hook_fired, _startup_task
    if _hook_fired:
        logger.debug("startup_hook already invoked; ignoring")
        return
    _hook_fired = True

    container = get_container()
    try:
        configure_logging(container.settings)
    except Exception as exc:
        container.sequencer.abort(
            StartupError(f"Logging setup failed: {exc}", original_error=exc)
        )
        return

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is None:
        asyncio.run(container.start())
    else:
        _startup_task = loop.create_task(container.start())


def get_controller(controller_type: type[T]) -> T:
    return get_container().get(controller_type)


async def wait_for_controllers() -> StartupReport | None:
    """Await startup completion; raises the startup error if it failed."""
    return await get_container().completion


def on_controllers_initialized(callback: Subscriber) -> Subscriber:
    return get_container().subscribe(callback)


def off_controllers_initialized(callback: Subscriber) -> bool:
    return get_container().unsubscribe(callback)


def _reset() -> None:
    """Forget the process-wide container and host. Test isolation only."""
    global _container, _host, _hook_fired, _startup_task
    _container = None
    _host = None
    _hook_fired = False
    _startup_task = None


__all__ = [
    "get_container",
    "get_controller",
    "off_controllers_initialized",
    "on_controllers_initialized",
    "set_host",
    "startup_hook",
    "wait_for_controllers",
]
