"""Command line entry point for checking a controller startup sequence."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from controller_init.app.container import ApplicationContainer
from controller_init.core.report import StartupReport
from controller_init.logging import configure_logging
from controller_init.settings import Settings
from controller_init.utilities.logging_patterns import get_logger

logger = get_logger(__name__, component="cli")

EXIT_OK = 0
EXIT_STARTUP_FAILED = 1
EXIT_CONFIG_ERROR = 2

__all__ = ["main"]


def main(argv: Sequence[str] | None = None) -> int:
    # Preserve host-provided values; only fill gaps from .env
    load_dotenv()

    parser = _build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    try:
        settings = Settings(**_settings_overrides(args))
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(settings)
    container = ApplicationContainer(settings)
    report = asyncio.run(container.start())

    if args.output_format == "json":
        print(json.dumps(report.to_dict(), indent=2, sort_keys=True))
    else:
        print(_format_text(report))

    return EXIT_OK if report.succeeded else EXIT_STARTUP_FAILED


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="controller-init",
        description="Import modules, run the controller startup sequence once and report.",
    )
    parser.add_argument(
        "modules",
        nargs="*",
        help="Modules to import before discovery (they define or register controllers).",
    )
    parser.add_argument("--mode", choices=("catalog", "scan"), dest="discovery_mode")
    parser.add_argument("--ordering", choices=("discovery", "name"))
    parser.add_argument(
        "--no-entry-points",
        action="store_true",
        help="Ignore the installed-plugin entry point manifest.",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        dest="output_format",
    )
    return parser


def _settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.modules:
        overrides["preload_modules"] = list(args.modules)
    if args.discovery_mode:
        overrides["discovery_mode"] = args.discovery_mode
    if args.ordering:
        overrides["ordering"] = args.ordering
    if args.no_entry_points:
        overrides["entry_point_group"] = None
    if args.log_level:
        overrides["log_level"] = args.log_level
    return overrides


def _format_text(report: StartupReport) -> str:
    lines = [f"Startup {report.startup_id}: {'ok' if report.succeeded else 'FAILED'}"]
    for cls in report.initialized:
        lines.append(f"  initialized  {cls.__module__}.{cls.__qualname__}")
    if report.error is not None:
        failed = report.failed_type
        label = f"{failed.__module__}.{failed.__qualname__}" if failed else "<startup>"
        lines.append(f"  failed       {label}: {report.error.message}")
    for cls in report.pending:
        lines.append(f"  skipped      {cls.__module__}.{cls.__qualname__}")
    for warning in report.warnings:
        lines.append(f"  warning      {warning}")
    lines.append(f"  took {report.duration_seconds * 1000:.1f} ms")
    return "\n".join(lines)
