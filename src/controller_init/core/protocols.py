"""Capability contracts consumed by the bootstrap engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Iterable
from typing import Any, Protocol, runtime_checkable


class Controller(ABC):
    """
    Capability marker for singleton controllers.

    A controller is identified by its concrete type. Exactly one instance of
    each concrete type ends up in the registry.
    """

    @property
    @abstractmethod
    def initialized(self) -> bool:
        """Whether the controller considers itself ready."""

    @abstractmethod
    def initialize(self) -> Awaitable[None] | None:
        """Start initialization; the sequencer awaits the returned awaitable."""


class BaseController(Controller):
    """
    Convenience base that tracks the ``initialized`` flag.

    Subclasses implement :meth:`setup`. Calling :meth:`initialize` on an
    instance that already finished is a no-op.
    """

    _initialized: bool = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        if self._initialized:
            return
        await self.setup()
        self._initialized = True

    @abstractmethod
    async def setup(self) -> None:
        """Controller-specific initialization."""


@runtime_checkable
class HostEnvironment(Protocol):
    """
    Collaborator that owns objects created outside this engine.

    ``managed_types`` are excluded from construction so host-owned
    controllers are not instantiated a second time.
    """

    @property
    def managed_types(self) -> tuple[type, ...]: ...

    def live_instances(self, capability: type[Any]) -> Iterable[Any]: ...


__all__ = ["Controller", "BaseController", "HostEnvironment"]
