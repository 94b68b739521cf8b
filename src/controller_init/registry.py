"""Type-keyed store of initialized controllers."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from controller_init.errors import (
    ControllerNotFoundError,
    ControllerTypeMismatchError,
    DuplicateRegistrationError,
    RegistryFrozenError,
)

T = TypeVar("T")


class ControllerRegistry:
    """
    Append-only registry of controller instances keyed by concrete type.

    Only the sequencer writes to it. Once :meth:`freeze` is called the
    registry is read-only and safe to share between readers without locking.
    Lookups use the exact registered type; a base class does not resolve to
    a subclass instance.
    """

    def __init__(self) -> None:
        self._controllers: dict[type, Any] = {}
        self._frozen = False

    def register(self, controller_type: type, instance: Any) -> None:
        if self._frozen:
            raise RegistryFrozenError(controller_type)
        if controller_type in self._controllers:
            raise DuplicateRegistrationError(controller_type)
        self._controllers[controller_type] = instance

    def get(self, controller_type: type[T]) -> T:
        try:
            instance = self._controllers[controller_type]
        except KeyError:
            raise ControllerNotFoundError(controller_type) from None
        if not isinstance(instance, controller_type):
            raise ControllerTypeMismatchError(controller_type, type(instance))
        return instance

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def types(self) -> list[type]:
        """Registered types in insertion order."""
        return list(self._controllers)

    def snapshot(self) -> Mapping[type, Any]:
        return MappingProxyType(self._controllers)

    def __contains__(self, controller_type: object) -> bool:
        return controller_type in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)

    def __repr__(self) -> str:
        names = ", ".join(cls.__name__ for cls in self._controllers)
        return f"ControllerRegistry([{names}], frozen={self._frozen})"


__all__ = ["ControllerRegistry"]
