"""Typed configuration backed by environment variables."""

from __future__ import annotations

import json
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, ClassVar, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_DEFAULT_ENV_FILES: tuple[Path, ...] = (
    Path(".env"),
    Path("config/environments/.env"),
)

DEFAULT_ENTRY_POINT_GROUP = "controller_init.controllers"


class Settings(BaseSettings):
    """Bootstrap configuration loaded from the environment and optional `.env` files."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="CONTROLLER_INIT_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    discovery_mode: Literal["catalog", "scan"] = Field(
        default="catalog",
        description=(
            "'catalog' constructs controllers from the explicit registration table; "
            "'scan' walks every loaded subclass of the capability."
        ),
    )
    ordering: Literal["discovery", "name"] = Field(
        default="discovery",
        description=(
            "'discovery' keeps source order; 'name' sorts constructed controllers by "
            "fully-qualified class name for cross-run determinism."
        ),
    )
    include_host_instances: bool = Field(
        default=True,
        description="Append controllers already managed by the host environment.",
    )
    entry_point_group: str | None = Field(
        default=DEFAULT_ENTRY_POINT_GROUP,
        description="Entry point group read as a plugin manifest; empty disables it.",
    )
    preload_modules: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Modules imported before discovery so their controllers are loaded.",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_dir: Path | None = Field(
        default=None,
        description="Directory for rotating log files; console-only when unset.",
    )
    json_logs: bool = Field(
        default=False,
        description="Also write JSON lines to <log_dir>/controller_init.jsonl.",
    )

    @field_validator("preload_modules", mode="before")
    @classmethod
    def split_preload_modules(cls, v: Any) -> Any:
        """Accept a JSON list or a comma-separated string of module names."""
        if not isinstance(v, str):
            return v
        text = v.strip()
        if text.startswith("["):
            return json.loads(text)
        return [name.strip() for name in text.split(",") if name.strip()]


def _existing_env_files() -> list[str]:
    return [str(path) for path in _DEFAULT_ENV_FILES if path.exists()]


@lru_cache
def get_settings(_env_files: Sequence[str] | None = None) -> Settings:
    """Load settings once per process, respecting `.env` fallbacks."""
    env_files = list(_env_files) if _env_files is not None else _existing_env_files()
    if env_files:
        return Settings(_env_file=env_files)
    return Settings()


__all__ = ["Settings", "get_settings", "DEFAULT_ENTRY_POINT_GROUP"]
