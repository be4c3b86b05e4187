"""
fleetsync CLI - push command.

Pushes the framework revision and managed files to every registered
project. Failed projects are reported and the run continues; the exit code
stays 0 unless --strict is given.
"""

import typer
from rich.console import Console
from rich.markup import escape

from fleetsync.cli.common import get_config, get_registry
from fleetsync.cli.errors import (
    ExitCode,
    print_framework_error,
    print_no_projects_warning,
    print_registry_error,
)
from fleetsync.core.exceptions import FleetSyncError, RegistryError
from fleetsync.core.sync import PushCoordinator, PushStatus, TargetOutcome

console = Console()


def _print_outcome(outcome: TargetOutcome) -> None:
    name = outcome.name
    if outcome.status == PushStatus.UP_TO_DATE:
        console.print(f"[green]✓[/green] {escape(name)} — already up to date")
    elif outcome.status == PushStatus.FAILED:
        console.print(f"[red]✗[/red] {escape(name)} — {escape(outcome.reason or '')}")
    else:
        console.print(f"[green]✓[/green] {escape(name)} — updated to {escape(outcome.to_revision or '')}")
        if outcome.files_copied:
            console.print(f"  [cyan]→[/cyan] {len(outcome.files_copied)} managed file(s) copied")
        if outcome.settings is not None and outcome.settings.hooks_added:
            console.print(
                f"  [cyan]→[/cyan] {len(outcome.settings.hooks_added)} hook(s) merged into settings"
            )
        if outcome.commit_sha:
            console.print(f"  [green]✓[/green] committed {outcome.commit_sha}")

    for conflict in outcome.conflicts:
        console.print(f"  [yellow]⚠[/yellow]  settings not merged: {escape(conflict)}")


def push(
    ctx: typer.Context,
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit 1 if any project failed or had a settings conflict (for CI)",
    ),
    publish: bool = typer.Option(
        False,
        "--publish",
        help="Push the framework branch to its remote before updating projects",
    ),
) -> None:
    """
    Push framework updates to all registered projects.

    Examples:
        fleetsync push              # Update every project, report failures
        fleetsync push --publish    # Publish the framework first
        fleetsync push --strict     # Non-zero exit if anything failed
    """
    config = get_config(ctx)
    registry = get_registry(config)
    coordinator = PushCoordinator(config, registry)

    try:
        if not any(True for _ in registry):
            print_no_projects_warning()
            raise typer.Exit(ExitCode.GENERAL_ERROR)

        revision = coordinator.framework.revision()
        console.print("\n[bold]Pushing framework updates to all projects[/bold]\n")
        console.print(f"  [cyan]→[/cyan] Framework at: {escape(revision.message)}\n")

        report = coordinator.push(publish=publish, on_outcome=_print_outcome)
    except RegistryError as e:
        print_registry_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except FleetSyncError as e:
        print_framework_error(getattr(e, "stderr", "") or str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if report.publish_error:
        console.print(f"[yellow]⚠[/yellow]  Framework not published: {escape(report.publish_error)}")

    console.print("\n[bold]Summary[/bold]")
    console.print(f"  {report.summary()}\n")

    if report.updated:
        console.print(
            "[yellow]⚠[/yellow]  Submodule updates are committed locally. "
            "Push each project when ready:"
        )
        console.print("  [dim]cd <project> && git push[/dim]")

    if strict and (report.failed or report.has_conflicts):
        raise typer.Exit(ExitCode.GENERAL_ERROR)
