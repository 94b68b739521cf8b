"""Core contracts shared by discovery, sequencing and consumers."""

from .protocols import BaseController, Controller, HostEnvironment
from .report import StartupReport

__all__ = ["BaseController", "Controller", "HostEnvironment", "StartupReport"]
