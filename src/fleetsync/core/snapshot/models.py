"""
Data models for snapshot comparison.

Defines Pydantic models describing managed files and how a target's copy
relates to the framework's copy.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class FileState(str, Enum):
    """State of a managed file in a target relative to the framework."""

    IDENTICAL = "identical"
    MISSING_IN_TARGET = "missing"
    DIVERGED_FROM_SOURCE = "diverged"


class ManagedFile(BaseModel):
    """A file covered by the managed-file manifest."""

    relative_path: str = Field(description="POSIX path relative to the project root")
    category: str = Field(description="Manifest category, or 'singleton'")
    executable: bool = Field(default=False)
    pull_new: bool = Field(
        default=False,
        description="Whether a target-only copy may be pulled into the framework",
    )


class FileComparison(BaseModel):
    """Comparison outcome for one managed file."""

    file: ManagedFile
    state: FileState
    diff_summary: str | None = Field(
        default=None,
        description="Short description of the change (diverged files only)",
    )
    diff: list[str] = Field(
        default_factory=list,
        description="Unified diff lines, framework copy first (diverged text files only)",
    )

    @property
    def relative_path(self) -> str:
        return self.file.relative_path


class SnapshotComparison(BaseModel):
    """
    Result of comparing a target against the framework.

    ``files`` covers every managed file present in the framework.
    ``untracked`` lists managed-looking files that exist only in the target;
    push ignores them and pull may bring them back.
    """

    source_root: Path
    target_root: Path
    files: list[FileComparison] = Field(default_factory=list)
    untracked: list[ManagedFile] = Field(default_factory=list)

    def with_state(self, state: FileState) -> list[FileComparison]:
        return [c for c in self.files if c.state == state]

    @property
    def changed(self) -> list[FileComparison]:
        """Files that differ from or are missing in the target."""
        return [c for c in self.files if c.state != FileState.IDENTICAL]

    @property
    def identical_count(self) -> int:
        return len(self.with_state(FileState.IDENTICAL))

    @property
    def in_sync(self) -> bool:
        return not self.changed
