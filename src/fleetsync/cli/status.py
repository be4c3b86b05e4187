"""
fleetsync CLI - status command.

Shows how far every registered project's framework submodule lags behind
the framework checkout. Read-only; always exits 0 once the framework
revision is known.
"""

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fleetsync.cli.common import get_config, get_registry
from fleetsync.cli.errors import (
    ExitCode,
    print_framework_error,
    print_no_projects_warning,
    print_registry_error,
)
from fleetsync.core.exceptions import FleetSyncError, RegistryError
from fleetsync.core.sync import StatusReporter, TargetState

console = Console()

STATE_STYLES = {
    TargetState.UP_TO_DATE: "green",
    TargetState.BEHIND: "yellow",
    TargetState.MISSING: "red",
    TargetState.UNKNOWN: "magenta",
}


def status(
    ctx: typer.Context,
    fetch: bool = typer.Option(
        True,
        "--fetch/--no-fetch",
        help="Fetch each submodule's remote before counting commits behind",
    ),
) -> None:
    """
    Show sync status across all registered projects.

    Examples:
        fleetsync status              # Fetch and compare every project
        fleetsync status --no-fetch   # Offline: compare with local objects only
    """
    config = get_config(ctx)
    registry = get_registry(config)

    try:
        report = StatusReporter(config, registry).report(fetch=fetch)
    except RegistryError as e:
        print_registry_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except FleetSyncError as e:
        print_framework_error(getattr(e, "stderr", "") or str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    console.print("\n[bold]Framework Sync Status[/bold]\n")
    console.print(f"  Framework: [bold]{escape(report.framework_message)}[/bold]\n")

    if not report.rows:
        print_no_projects_warning()
        return

    table = Table(show_edge=False, pad_edge=False)
    table.add_column("PROJECT", style="bold")
    table.add_column("STATUS", no_wrap=True)
    table.add_column("PINNED TO", overflow="fold")

    for row in report.rows:
        style = STATE_STYLES[row.state]
        table.add_row(escape(row.name), f"[{style}]{row.label}[/{style}]", escape(row.pinned))

    console.print(table)
    console.print()
