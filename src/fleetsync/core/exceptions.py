"""
Exceptions raised by the fleetsync core.

Exception Hierarchy:
    FleetSyncError (base)
    ├── RegistryError (registry file cannot be read or written)
    │   └── NotLinked (project has no linkage marker)
    ├── ComparisonError
    │   ├── SourceUnreadable
    │   └── TargetUnreadable
    ├── MergeConflict (settings document cannot be merged)
    ├── NoManagedDirectory (nothing to pull from)
    ├── GitError (git command failed)
    │   └── TargetTimeout (per-target deadline expired)

Advisory outcomes such as "already registered" or "nothing to pull" are
returned as result values, not raised.
"""

from __future__ import annotations

from pathlib import Path


class FleetSyncError(Exception):
    """
    Base exception for all fleetsync errors.

    Attributes:
        message: Human-readable error message
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class RegistryError(FleetSyncError):
    """Raised when the registry file cannot be read or written."""


class NotLinked(RegistryError):
    """Raised when registering a project that lacks the linkage marker."""

    def __init__(self, path: Path, marker_dir: str) -> None:
        super().__init__(f"{path} does not have a {marker_dir} submodule")
        self.path = path
        self.marker_dir = marker_dir


class ComparisonError(FleetSyncError):
    """Base class for snapshot comparison failures."""

    def __init__(self, message: str, root: Path) -> None:
        super().__init__(message)
        self.root = root


class SourceUnreadable(ComparisonError):
    """The framework side of a comparison could not be read."""


class TargetUnreadable(ComparisonError):
    """The target side of a comparison could not be read."""


class MergeConflict(FleetSyncError):
    """
    Raised when a settings document cannot be merged automatically.

    The existing document is left untouched; the conflict must be resolved
    by hand.
    """

    def __init__(self, message: str, file_path: Path | None = None) -> None:
        super().__init__(message)
        self.file_path = file_path


class NoManagedDirectory(FleetSyncError):
    """Raised when a pull source has none of the managed directories."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"No managed directories found in {path}")
        self.path = path


class GitError(FleetSyncError):
    """Exception raised when a git operation fails."""

    def __init__(self, message: str, command: list[str] | None = None, stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.stderr = stderr


class TargetTimeout(GitError):
    """Raised when a target exceeds its time budget."""
