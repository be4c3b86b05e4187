"""
fleetsync CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from fleetsync import __version__
from fleetsync.cli import pull, push, registry, status
from fleetsync.cli.common import setup_logging
from fleetsync.core.config import load_layered_env
from fleetsync.core.config.loader import ENV_FRAMEWORK_DIR, ENV_REGISTRY

PANEL_SYNC = "Sync Projects"
PANEL_REGISTRY = "Manage Registered Projects"

app = typer.Typer(
    name="fleetsync",
    help="Keep projects linked to the Claude framework in sync with it",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    framework: Optional[Path] = typer.Option(
        None,
        "--framework",
        "-F",
        envvar=ENV_FRAMEWORK_DIR,
        help="Framework repository (default: current directory)",
    ),
    registry_file: Optional[Path] = typer.Option(
        None,
        "--registry",
        envvar=ENV_REGISTRY,
        help="Registry file (default: ~/.fleetsync/projects.txt)",
    ),
) -> None:
    """
    fleetsync - bidirectional sync for the Claude framework.

    The framework repository is the source of truth for agents, commands,
    hooks and scripts. Projects link to it through a git submodule and are
    listed in a registry.

    Workflow:
        1. Discover projects:     fleetsync discover ~/Projects
        2. Check status:          fleetsync status
        3. After a framework change:
           Push to all:           fleetsync push
        4. After a project-level improvement:
           Pull to framework:     fleetsync pull /path/to/project
           Then push to all:      fleetsync push --publish
    """
    setup_logging(debug)
    load_layered_env()

    ctx.obj = {"debug": debug, "framework": framework, "registry": registry_file}


# =============================================================================
# Sync Projects
# =============================================================================

app.command(name="status", rich_help_panel=PANEL_SYNC)(status.status)
app.command(name="push", rich_help_panel=PANEL_SYNC)(push.push)
app.command(name="pull", rich_help_panel=PANEL_SYNC)(pull.pull)


# =============================================================================
# Manage Registered Projects
# =============================================================================

app.command(name="register", rich_help_panel=PANEL_REGISTRY)(registry.register)
app.command(name="unregister", rich_help_panel=PANEL_REGISTRY)(registry.unregister)
app.command(name="discover", rich_help_panel=PANEL_REGISTRY)(registry.discover)


@app.command(rich_help_panel=PANEL_REGISTRY)
def version() -> None:
    """Show fleetsync version and exit."""
    console.print(f"fleetsync version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
