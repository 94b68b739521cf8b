"""Centralized logging setup for the controller bootstrap."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import TYPE_CHECKING

from controller_init.logging.json_formatter import StructuredJSONFormatter

if TYPE_CHECKING:
    from controller_init.settings import Settings

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_flag(name: str, default: str = "0") -> bool:
    raw_value = os.environ.get(name, default)
    return str(raw_value).strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw_value = os.environ.get(name)
    if raw_value is None or not raw_value.strip():
        return default
    return int(raw_value)


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure console logging and, when a log directory is set, rotating files.

    Safe to call repeatedly; handlers targeting the same stream or file are
    not added twice.

    Args:
        settings: Bootstrap settings; defaults are used when omitted.
    """
    if settings is None:
        from controller_init.settings import get_settings

        settings = get_settings()

    level = logging.getLevelName(settings.log_level)
    package_logger = logging.getLogger("controller_init")
    package_logger.setLevel(level)
    if _env_flag("CONTROLLER_INIT_DEBUG"):
        package_logger.setLevel(logging.DEBUG)

    root = logging.getLogger()
    existing_targets = {
        getattr(handler, "baseFilename", None)
        for handler in root.handlers
        if hasattr(handler, "baseFilename")
    }

    # Check for console StreamHandlers (exclude file handlers and test fixtures)
    console_handlers = [
        h
        for h in root.handlers
        if isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.FileHandler)
        and type(h).__name__ not in {"LogCaptureHandler", "_LiveLoggingNullHandler"}
    ]
    if not console_handlers:
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root.addHandler(console)

    if settings.log_dir is None:
        return

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    max_bytes = _env_int("CONTROLLER_INIT_LOG_MAX_BYTES", 10 * 1024 * 1024)
    backups = _env_int("CONTROLLER_INIT_LOG_BACKUP_COUNT", 5)

    general_path = str((log_dir / "controller_init.log").resolve())
    if general_path not in existing_targets:
        general_handler = logging.handlers.RotatingFileHandler(
            general_path,
            maxBytes=max_bytes,
            backupCount=backups,
        )
        general_handler.setLevel(level)
        general_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root.addHandler(general_handler)

    if not settings.json_logs:
        return

    json_path = str((log_dir / "controller_init.jsonl").resolve())
    if json_path not in existing_targets:
        json_handler = logging.handlers.RotatingFileHandler(
            json_path,
            maxBytes=max_bytes,
            backupCount=backups,
        )
        json_handler.setLevel(logging.DEBUG)
        json_handler.setFormatter(StructuredJSONFormatter(sort_keys=True))
        root.addHandler(json_handler)


__all__ = ["configure_logging", "DEFAULT_FORMAT"]
