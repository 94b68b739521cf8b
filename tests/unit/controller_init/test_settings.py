from __future__ import annotations

import pytest
from pydantic import ValidationError

from controller_init.settings import DEFAULT_ENTRY_POINT_GROUP, Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CONTROLLER_INIT_PRELOAD_MODULES", raising=False)

    settings = Settings(_env_file=None)

    assert settings.discovery_mode == "catalog"
    assert settings.ordering == "discovery"
    assert settings.entry_point_group == DEFAULT_ENTRY_POINT_GROUP
    assert settings.preload_modules == []


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("game.audio", ["game.audio"]),
        ("game.audio, game.save ,game.ui", ["game.audio", "game.save", "game.ui"]),
        ('["game.audio", "game.save"]', ["game.audio", "game.save"]),
        ("", []),
    ],
)
def test_preload_modules_from_environment(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: list[str]
) -> None:
    monkeypatch.setenv("CONTROLLER_INIT_PRELOAD_MODULES", raw)

    assert Settings(_env_file=None).preload_modules == expected


def test_preload_modules_accepts_list_argument() -> None:
    settings = Settings(_env_file=None, preload_modules=["game.audio"])

    assert settings.preload_modules == ["game.audio"]


def test_invalid_mode_from_environment_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTROLLER_INIT_ORDERING", "random")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
