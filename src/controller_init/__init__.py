"""
controller-init - ordered, run-once startup for singleton controllers.

Register controllers with ``@controller``, have the host call
``startup_hook()`` once, and retrieve initialized instances with
``get_controller(SomeController)`` after awaiting ``wait_for_controllers()``.
"""

from __future__ import annotations

from controller_init.core import BaseController, Controller, HostEnvironment, StartupReport
from controller_init.discovery import ControllerCatalog, ObjectPoolHost

__version__ = "1.0.0"

# Process-wide registration table read by the default container.
catalog = ControllerCatalog()
controller = catalog.register

from controller_init.runtime import (  # noqa: E402
    get_container,
    get_controller,
    off_controllers_initialized,
    on_controllers_initialized,
    set_host,
    startup_hook,
    wait_for_controllers,
)

__all__ = [
    "__version__",
    "BaseController",
    "Controller",
    "ControllerCatalog",
    "HostEnvironment",
    "ObjectPoolHost",
    "StartupReport",
    "catalog",
    "controller",
    "get_container",
    "get_controller",
    "off_controllers_initialized",
    "on_controllers_initialized",
    "set_host",
    "startup_hook",
    "wait_for_controllers",
]
