"""
Standardized error handling and exit codes for the fleetsync CLI.

This module provides consistent error messaging with actionable guidance
and standardized exit codes across all CLI commands.
"""

from enum import IntEnum

from rich.console import Console
from rich.markup import escape

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for fleetsync CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Generic error, or a strict push with failed targets."""

    USER_ERROR = 2
    """User configuration or input error (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "/src/app is not linked to the framework",
        ...     solution="git submodule add <framework-url> .claude-framework",
        ... )
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {escape(solution)}")


def print_not_linked_error(path: str, marker_dir: str) -> None:
    """Print error when a project has no framework submodule."""
    print_error(
        f"{path} does not have a {marker_dir} submodule",
        reason="Only projects linked to the framework through a submodule can be registered",
        solution=f"cd {path} && git submodule add <framework-url> {marker_dir}",
    )


def print_framework_error(message: str) -> None:
    """Print error when the framework revision cannot be read."""
    print_error(
        message,
        reason="The framework directory must be a git checkout with at least one commit",
        solution="fleetsync --framework /path/to/claude-framework <command>",
    )


def print_registry_error(message: str) -> None:
    """Print error when the registry file cannot be used."""
    print_error(
        message,
        reason="The registry file lists every project fleetsync manages",
        solution="fleetsync --registry /writable/path/projects.txt <command>",
    )


def print_no_projects_warning() -> None:
    """Print hint when no projects are registered."""
    console.print(
        "[yellow]⚠[/yellow]  No projects registered. "
        "Run: [bold]fleetsync register /path/to/project[/bold]"
    )
    console.print("\n  Or auto-discover projects:")
    console.print("    [bold]fleetsync discover /path/to/projects/dir[/bold]")
