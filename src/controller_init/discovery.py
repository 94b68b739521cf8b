"""
Controller discovery.

Candidate controller types come from one or more type sources:

- ``ControllerCatalog``: an explicit registration table (the default)
- ``SubclassScan``: every loaded subclass of the capability
- ``EntryPointSource``: an installed-plugin manifest

Candidates are filtered (concrete, implements the capability, not excluded),
constructed in source order, and followed by instances the host environment
already manages.
"""

from __future__ import annotations

import importlib
import inspect
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import Any, Literal, Protocol

from controller_init.core.protocols import Controller, HostEnvironment
from controller_init.errors import ConstructionError, StartupError
from controller_init.utilities.logging_patterns import get_logger

logger = get_logger(__name__, component="discovery")

Factory = Callable[[], Any]
Ordering = Literal["discovery", "name"]


@dataclass(frozen=True)
class ControllerSpec:
    """A candidate controller type and the factory used to build it."""

    controller_type: type
    factory: Factory | None = None

    @property
    def qualified_name(self) -> str:
        return f"{self.controller_type.__module__}.{self.controller_type.__qualname__}"

    def build(self) -> Any:
        factory = self.factory or self.controller_type
        try:
            return factory()
        except Exception as exc:
            raise ConstructionError(self.controller_type, exc) from exc


class TypeSource(Protocol):
    def specs(self, capability: type) -> Iterable[ControllerSpec]: ...


class ControllerCatalog:
    """Explicit registration table of controller types, kept in registration order."""

    def __init__(self) -> None:
        self._specs: dict[type, ControllerSpec] = {}

    def add(self, controller_type: type, factory: Factory | None = None) -> None:
        if controller_type in self._specs:
            logger.debug(f"{controller_type.__name__} already in catalog; keeping first entry")
            return
        self._specs[controller_type] = ControllerSpec(controller_type, factory)

    def register(self, controller_type: type | None = None, *, factory: Factory | None = None) -> Any:
        """Class decorator form of :meth:`add`.

        Usable bare (``@catalog.register``) or with a factory
        (``@catalog.register(factory=make_audio)``).
        """

        def decorator(cls: type) -> type:
            self.add(cls, factory)
            return cls

        if controller_type is not None:
            return decorator(controller_type)
        return decorator

    def specs(self, capability: type) -> Iterator[ControllerSpec]:
        yield from self._specs.values()

    def __contains__(self, controller_type: object) -> bool:
        return controller_type in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def clear(self) -> None:
        self._specs.clear()


class SubclassScan:
    """Reflective source walking every loaded subclass of the capability.

    Walk order is depth-first in class definition order, which is stable for
    a given set of imported modules.
    """

    def specs(self, capability: type) -> Iterator[ControllerSpec]:
        seen: set[type] = set()
        for cls in _walk_subclasses(capability):
            if cls in seen:
                continue
            seen.add(cls)
            yield ControllerSpec(cls)


def _walk_subclasses(cls: type) -> Iterator[type]:
    for sub in cls.__subclasses__():
        yield sub
        yield from _walk_subclasses(sub)


class EntryPointSource:
    """Plugin manifest source backed by ``importlib.metadata`` entry points."""

    def __init__(self, group: str) -> None:
        self.group = group

    def specs(self, capability: type) -> Iterator[ControllerSpec]:
        for entry_point in entry_points(group=self.group):
            loaded = entry_point.load()
            if not isinstance(loaded, type):
                logger.warning(
                    f"Entry point {entry_point.name} in {self.group} is not a class; skipped",
                    entry_point=entry_point.value,
                )
                continue
            yield ControllerSpec(loaded)


def is_candidate(cls: type, capability: type, exclude: Iterable[type] = ()) -> bool:
    """Return whether ``cls`` is a concrete, non-excluded implementation of ``capability``."""
    if not isinstance(cls, type) or getattr(cls, "_is_protocol", False):
        return False
    if inspect.isabstract(cls) or not issubclass(cls, capability):
        return False
    return not any(issubclass(cls, excluded) for excluded in exclude)


class ObjectPoolHost:
    """In-process host environment holding pre-existing objects.

    ``live_instances`` returns, in insertion order, every held object that
    is an instance of the requested capability.
    """

    def __init__(
        self,
        objects: Iterable[Any] = (),
        managed_types: Iterable[type] = (),
    ) -> None:
        self._objects: list[Any] = list(objects)
        self._managed_types = tuple(managed_types)

    @property
    def managed_types(self) -> tuple[type, ...]:
        return self._managed_types

    def attach(self, obj: Any) -> None:
        self._objects.append(obj)

    def live_instances(self, capability: type[Any]) -> list[Any]:
        return [obj for obj in self._objects if isinstance(obj, capability)]


class Discovery:
    """Find, filter and instantiate controllers, then append host-managed ones."""

    def __init__(
        self,
        sources: Sequence[TypeSource],
        *,
        capability: type = Controller,
        exclude: Iterable[type] = (),
        host: HostEnvironment | None = None,
        ordering: Ordering = "discovery",
        include_host_instances: bool = True,
        preload_modules: Sequence[str] = (),
    ) -> None:
        self.sources = list(sources)
        self.preload_modules = tuple(preload_modules)
        self.capability = capability
        self.host = host
        self.ordering = ordering
        self.include_host_instances = include_host_instances
        excluded = list(exclude)
        if host is not None:
            excluded.extend(host.managed_types)
        self.exclude = tuple(excluded)

    def preload(self) -> None:
        """Import configured modules so the controllers they define are loaded."""
        for module_name in self.preload_modules:
            importlib.import_module(module_name)
            logger.debug(f"Preloaded {module_name}")

    def candidate_specs(self) -> list[ControllerSpec]:
        self.preload()
        seen: set[type] = set()
        specs: list[ControllerSpec] = []
        for source in self.sources:
            for spec in source.specs(self.capability):
                if spec.controller_type in seen:
                    continue
                if not is_candidate(spec.controller_type, self.capability, self.exclude):
                    logger.debug(f"Skipping {spec.qualified_name}")
                    continue
                seen.add(spec.controller_type)
                specs.append(spec)
        if self.ordering == "name":
            specs.sort(key=lambda spec: spec.qualified_name)
        return specs

    def candidate_types(self) -> list[type]:
        return [spec.controller_type for spec in self.candidate_specs()]

    def create_instances(self) -> list[Any]:
        """Construct one instance per candidate type; failures raise ConstructionError."""
        return [spec.build() for spec in self.candidate_specs()]

    def host_instances(self) -> list[Any]:
        if self.host is None or not self.include_host_instances:
            return []
        try:
            instances = list(self.host.live_instances(self.capability))
        except Exception as exc:
            raise StartupError(
                f"Host environment query failed: {exc}",
                original_error=exc,
            ) from exc
        return [obj for obj in instances if isinstance(obj, self.capability)]

    def discover(self) -> list[Any]:
        """Constructed controllers first, then host-managed ones, each in scan order."""
        created = self.create_instances()
        hosted = self.host_instances()
        logger.info(
            f"Discovered {len(created) + len(hosted)} controllers",
            constructed=len(created),
            host_managed=len(hosted),
        )
        return created + hosted


__all__ = [
    "ControllerCatalog",
    "ControllerSpec",
    "Discovery",
    "EntryPointSource",
    "ObjectPoolHost",
    "SubclassScan",
    "TypeSource",
    "is_candidate",
]
