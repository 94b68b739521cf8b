"""
Tests for the controller-init command line entry point.
"""

from __future__ import annotations

import json
import sys
import textwrap
from pathlib import Path

import pytest

import controller_init
from controller_init import cli
from controller_init.discovery import ControllerCatalog

CONTROLLERS_OK = """
from controller_init import BaseController, controller


@controller
class ConfigController(BaseController):
    async def setup(self) -> None:
        self.values = {"volume": 7}


@controller
class AudioController(BaseController):
    async def setup(self) -> None:
        self.muted = False
"""

CONTROLLERS_BROKEN = """
from controller_init import BaseController, controller


@controller
class SaveGameController(BaseController):
    async def setup(self) -> None:
        raise OSError("save slot unreadable")


@controller
class LeaderboardController(BaseController):
    async def setup(self) -> None:
        pass
"""


@pytest.fixture
def controllers_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    catalog = ControllerCatalog()
    monkeypatch.setattr(controller_init, "catalog", catalog)
    monkeypatch.setattr(controller_init, "controller", catalog.register)
    monkeypatch.setattr(cli, "configure_logging", lambda settings: None)
    monkeypatch.syspath_prepend(str(tmp_path))

    def _write(name: str, source: str) -> str:
        (tmp_path / f"{name}.py").write_text(textwrap.dedent(source))
        monkeypatch.delitem(sys.modules, name, raising=False)
        return name

    return _write


def test_cli_reports_success_as_json(controllers_module, capsys) -> None:
    module = controllers_module("cli_controllers_ok", CONTROLLERS_OK)

    exit_code = cli.main(["--no-entry-points", "--format", "json", module])

    assert exit_code == cli.EXIT_OK
    payload = json.loads(capsys.readouterr().out)
    assert payload["succeeded"] is True
    assert payload["initialized"] == [
        f"{module}.ConfigController",
        f"{module}.AudioController",
    ]
    assert payload["pending"] == []


def test_cli_reports_failure_in_text(controllers_module, capsys) -> None:
    module = controllers_module("cli_controllers_broken", CONTROLLERS_BROKEN)

    exit_code = cli.main(["--no-entry-points", module])

    assert exit_code == cli.EXIT_STARTUP_FAILED
    output = capsys.readouterr().out
    assert "FAILED" in output
    assert f"failed       {module}.SaveGameController" in output
    assert f"skipped      {module}.LeaderboardController" in output


def test_cli_missing_module_is_a_startup_failure(controllers_module, capsys) -> None:
    exit_code = cli.main(["--no-entry-points", "--format", "json", "no_such_module_xyz"])

    assert exit_code == cli.EXIT_STARTUP_FAILED
    payload = json.loads(capsys.readouterr().out)
    assert payload["failed_type"] is None
    assert "no_such_module_xyz" in payload["error"]["message"]


def test_cli_invalid_environment_is_a_config_error(
    controllers_module, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    monkeypatch.setenv("CONTROLLER_INIT_DISCOVERY_MODE", "telepathy")

    exit_code = cli.main(["--no-entry-points"])

    assert exit_code == cli.EXIT_CONFIG_ERROR
    assert "Invalid configuration" in capsys.readouterr().err
