from __future__ import annotations

from typing import TypeVar

from controller_init.core.protocols import Controller, HostEnvironment
from controller_init.core.report import StartupReport
from controller_init.discovery import (
    ControllerCatalog,
    Discovery,
    EntryPointSource,
    SubclassScan,
    TypeSource,
)
from controller_init.registry import ControllerRegistry
from controller_init.settings import Settings
from controller_init.signal import CompletionSignal, CompletionToken, Subscriber
from controller_init.sequencer import Sequencer

T = TypeVar("T")


def create_type_sources(settings: Settings, catalog: ControllerCatalog) -> list[TypeSource]:
    """Build the discovery sources selected by ``settings``.

    The entry point manifest, when configured, is read after the primary
    source so explicitly registered or scanned types keep their position.
    """
    sources: list[TypeSource]
    if settings.discovery_mode == "scan":
        sources = [SubclassScan()]
    else:
        sources = [catalog]
    if settings.entry_point_group:
        sources.append(EntryPointSource(settings.entry_point_group))
    return sources


class ApplicationContainer:
    """
    Composition root for the controller bootstrap.

    Owns one registry, one completion signal, the discovery configuration
    and the sequencer. Collaborators are created lazily on first access.

    Usage:
        container = ApplicationContainer(settings, host=host)
        report = await container.start()
        report.raise_for_failure()
        audio = container.get(AudioController)
    """

    def __init__(
        self,
        settings: Settings,
        host: HostEnvironment | None = None,
        catalog: ControllerCatalog | None = None,
        capability: type = Controller,
    ):
        self.settings = settings
        self.host = host
        self.capability = capability
        if catalog is None:
            from controller_init import catalog as default_catalog

            catalog = default_catalog
        self.catalog = catalog

        self._discovery: Discovery | None = None
        self._registry: ControllerRegistry | None = None
        self._signal: CompletionSignal | None = None
        self._sequencer: Sequencer | None = None

    @property
    def discovery(self) -> Discovery:
        if self._discovery is None:
            self._discovery = Discovery(
                create_type_sources(self.settings, self.catalog),
                capability=self.capability,
                host=self.host,
                ordering=self.settings.ordering,
                include_host_instances=self.settings.include_host_instances,
                preload_modules=self.settings.preload_modules,
            )
        return self._discovery

    @property
    def registry(self) -> ControllerRegistry:
        if self._registry is None:
            self._registry = ControllerRegistry()
        return self._registry

    @property
    def signal(self) -> CompletionSignal:
        if self._signal is None:
            self._signal = CompletionSignal()
        return self._signal

    @property
    def sequencer(self) -> Sequencer:
        if self._sequencer is None:
            self._sequencer = Sequencer(self.discovery, self.registry, self.signal)
        return self._sequencer

    @property
    def completion(self) -> CompletionToken:
        return self.signal.token

    async def start(self) -> StartupReport:
        """Run the startup sequence once and return its report for inspection."""
        return await self.sequencer.run()

    def get(self, controller_type: type[T]) -> T:
        return self.registry.get(controller_type)

    def subscribe(self, callback: Subscriber) -> Subscriber:
        return self.signal.subscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> bool:
        return self.signal.unsubscribe(callback)


def create_application_container(
    settings: Settings,
    host: HostEnvironment | None = None,
    catalog: ControllerCatalog | None = None,
) -> ApplicationContainer:
    return ApplicationContainer(settings, host=host, catalog=catalog)
