"""
fleetsync CLI - register, unregister and discover commands.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from fleetsync.cli.common import get_config, get_registry, resolve_dir
from fleetsync.cli.errors import ExitCode, print_not_linked_error, print_registry_error
from fleetsync.core.exceptions import NotLinked, RegistryError
from fleetsync.core.registry import RegistrationOutcome
from fleetsync.core.sync import discover as discover_projects

console = Console()


def register(
    ctx: typer.Context,
    project_dir: Optional[Path] = typer.Argument(
        None,
        help="Project to register (default: current directory)",
    ),
) -> None:
    """
    Register a project linked to the framework.

    Examples:
        fleetsync register                 # Register the current directory
        fleetsync register ~/src/my-app    # Register another project
    """
    config = get_config(ctx)
    project = resolve_dir(project_dir)

    try:
        result = get_registry(config).register(project)
    except NotLinked as e:
        print_not_linked_error(str(e.path), e.marker_dir)
        raise typer.Exit(ExitCode.USER_ERROR)
    except RegistryError as e:
        print_registry_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if result.outcome == RegistrationOutcome.ALREADY_REGISTERED:
        console.print(f"[yellow]⚠[/yellow]  Already registered: {escape(str(result.path))}")
    else:
        console.print(f"[green]✓[/green] Registered: {escape(str(result.path))}")


def unregister(
    ctx: typer.Context,
    project_dir: Optional[Path] = typer.Argument(
        None,
        help="Project to unregister (default: current directory)",
    ),
) -> None:
    """
    Remove a project from the registry.

    The project does not need to exist any more.
    """
    config = get_config(ctx)
    project = (project_dir or Path.cwd()).expanduser().resolve()

    try:
        result = get_registry(config).unregister(project)
    except RegistryError as e:
        print_registry_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if result.outcome == RegistrationOutcome.NOT_REGISTERED:
        console.print(f"[yellow]⚠[/yellow]  Not registered: {escape(str(result.path))}")
    else:
        console.print(f"[green]✓[/green] Unregistered: {escape(str(result.path))}")


def discover(
    ctx: typer.Context,
    search_dir: Optional[Path] = typer.Argument(
        None,
        help="Directory to scan (default: the framework's parent directory)",
    ),
) -> None:
    """
    Discover and register all linked projects in a directory.

    Looks for the framework submodule in the directory itself and in its
    immediate subdirectories. The framework checkout is never registered.

    Examples:
        fleetsync discover ~/Projects
    """
    config = get_config(ctx)
    root = resolve_dir(search_dir) if search_dir is not None else None

    try:
        result = discover_projects(config, get_registry(config), root)
    except RegistryError as e:
        print_registry_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    console.print(f"\n[bold]Discovering projects in {escape(str(result.search_root))}[/bold]\n")

    for path in result.registered:
        console.print(f"[green]✓[/green] Registered: {escape(str(path))}")
    for path in result.already_registered:
        console.print(f"[yellow]⚠[/yellow]  Already registered: {escape(str(path))}")

    console.print()
    if result.found == 0:
        console.print(
            f"[yellow]⚠[/yellow]  No projects with {escape(config.marker_dir)} found in "
            f"{escape(str(result.search_root))}"
        )
    else:
        console.print(f"[green]✓[/green] Discovered and registered {result.found} project(s)")
