"""
fleetsync CLI - pull command.

Pulls agents, commands, hooks and scripts edited inside a project back into
the framework so the next push can propagate them.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from fleetsync.cli.common import get_config, resolve_dir
from fleetsync.cli.errors import ExitCode, print_error
from fleetsync.core.exceptions import ComparisonError, FleetSyncError, NoManagedDirectory
from fleetsync.core.sync import PullCoordinator

console = Console()


def pull(
    ctx: typer.Context,
    project_dir: Optional[Path] = typer.Argument(
        None,
        help="Project to pull from (default: current directory)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be pulled without copying anything",
    ),
    show_diff: bool = typer.Option(
        False,
        "--diff",
        help="Print the unified diff of every modified file",
    ),
) -> None:
    """
    Pull changes from a project back into the framework.

    Examples:
        fleetsync pull                    # Pull from the current project
        fleetsync pull ~/src/my-app       # Pull from another project
        fleetsync pull --dry-run --diff   # Preview changes with diffs
    """
    config = get_config(ctx)
    project = resolve_dir(project_dir)
    coordinator = PullCoordinator(config)

    console.print(f"\n[bold]Pulling changes from {escape(project.name)} into framework[/bold]\n")

    try:
        report = coordinator.pull(project, dry_run=dry_run)
    except NoManagedDirectory as e:
        print_error(
            str(e),
            reason="Pull looks for " + ", ".join(c.root for c in config.categories),
        )
        raise typer.Exit(ExitCode.USER_ERROR)
    except ComparisonError as e:
        print_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except (FleetSyncError, OSError) as e:
        print_error(f"Pull failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    for managed in report.new_files:
        console.print(f"[cyan]→[/cyan] NEW {escape(managed.category)}: {escape(managed.relative_path)}")

    for item in report.modified_files:
        console.print(
            f"[yellow]⚠[/yellow]  MODIFIED {escape(item.file.category)}: "
            f"{escape(item.relative_path)} ({escape(item.diff_summary or '')})"
        )
        if show_diff and item.diff:
            for line in item.diff:
                console.print(line, markup=False, highlight=False)

    console.print()
    if report.change_count == 0:
        console.print("[green]✓[/green] No changes to pull — framework and project are in sync")
        return

    if dry_run:
        console.print(f"[blue]Would pull {report.change_count} change(s) (dry run)[/blue]")
        return

    console.print(f"[green]✓[/green] Pulled {report.change_count} change(s) into framework")
    console.print("\n[cyan]→[/cyan] Next steps:")
    console.print(f"    cd {escape(str(coordinator.framework.root))}")
    console.print(f"    git add -A && git commit -m 'feat: pull changes from {escape(project.name)}'")
    console.print("    fleetsync push --publish   # propagate to all other projects")
