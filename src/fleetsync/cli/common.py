"""
Helpers shared by the CLI commands: config and registry from the Typer context.
"""

import logging
import sys
from pathlib import Path

import typer
from pydantic import ValidationError

from fleetsync.cli.errors import ExitCode, print_error
from fleetsync.core.config import FleetConfig, load_config
from fleetsync.core.registry import Registry


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for fleetsync commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def get_config(ctx: typer.Context) -> FleetConfig:
    """
    Load configuration, applying the global CLI options on top.

    Exits with USER_ERROR if the configuration is invalid.
    """
    options = ctx.obj or {}
    overrides = {
        "framework_dir": options.get("framework"),
        "registry_file": options.get("registry"),
    }
    try:
        return load_config(overrides)
    except ValidationError as e:
        print_error("Invalid configuration", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR)


def get_registry(config: FleetConfig) -> Registry:
    return Registry(config.registry_file, marker_dir=config.marker_dir)


def resolve_dir(path: Path | None) -> Path:
    """
    Resolve a directory argument, defaulting to the cwd.

    Exits with USER_ERROR if the directory does not exist.
    """
    resolved = (path or Path.cwd()).expanduser().resolve()
    if not resolved.is_dir():
        print_error(f"Directory does not exist: {resolved}")
        raise typer.Exit(ExitCode.USER_ERROR)
    return resolved
