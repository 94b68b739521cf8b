from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

from controller_init import runtime
from controller_init.core.protocols import BaseController
from controller_init.discovery import ControllerCatalog
from controller_init.settings import Settings


class Journal:
    """Records controller setup start/end events in the order they happen."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    def started(self) -> list[str]:
        return [name for kind, name in self.events if kind == "start"]

    def finished(self) -> list[str]:
        return [name for kind, name in self.events if kind == "end"]


def build_controller_type(
    name: str,
    journal: Journal,
    *,
    fail: Exception | None = None,
    delay: float = 0.0,
) -> type[BaseController]:
    async def setup(self: BaseController) -> None:
        journal.events.append(("start", name))
        await asyncio.sleep(delay)
        if fail is not None:
            raise fail
        journal.events.append(("end", name))

    return type(name, (BaseController,), {"setup": setup, "__module__": __name__})


@pytest.fixture
def journal() -> Journal:
    return Journal()


@pytest.fixture
def make_controller(journal: Journal) -> Callable[..., type[BaseController]]:
    def _factory(
        name: str, *, fail: Exception | None = None, delay: float = 0.0
    ) -> type[BaseController]:
        return build_controller_type(name, journal, fail=fail, delay=delay)

    return _factory


@pytest.fixture
def catalog() -> ControllerCatalog:
    return ControllerCatalog()


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Factory for Settings isolated from the process environment and .env files."""

    def _factory(**overrides) -> Settings:
        values = {"entry_point_group": None, "log_level": "DEBUG"}
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _factory


@pytest.fixture
def fresh_runtime():
    runtime._reset()
    yield runtime
    runtime._reset()
