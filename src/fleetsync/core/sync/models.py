"""
Data models for the sync coordinators.

Defines Pydantic models for push, pull, status and discover reports.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from fleetsync.core.settings.models import SettingsMergeResult
from fleetsync.core.snapshot.models import FileComparison, ManagedFile


class PushStatus(str, Enum):
    """Outcome of pushing the framework to one target."""

    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"
    FAILED = "failed"


class TargetOutcome(BaseModel):
    """
    What happened to one target during a push.

    Example:
        >>> outcome = TargetOutcome(path=Path("/src/app"), status=PushStatus.UP_TO_DATE)
        >>> outcome.name
        'app'
    """

    path: Path
    status: PushStatus
    reason: str | None = Field(default=None, description="Why the target failed")
    from_revision: str | None = Field(default=None, description="Linked revision before push")
    to_revision: str | None = Field(default=None, description="Linked revision after push")
    files_copied: list[str] = Field(default_factory=list)
    settings: SettingsMergeResult | None = None
    conflicts: list[str] = Field(
        default_factory=list,
        description="Documents left untouched because they could not be merged",
    )
    commit_sha: str | None = Field(default=None, description="Commit created in the target")

    @property
    def name(self) -> str:
        return self.path.name


class PushReport(BaseModel):
    """
    Result of pushing the framework to every registered target.

    Outcomes are kept in registry order.
    """

    framework_revision: str
    outcomes: list[TargetOutcome] = Field(default_factory=list)
    publish_error: str | None = Field(
        default=None,
        description="Set when publishing the framework to its remote failed",
    )
    started_at: datetime | None = Field(default=None)
    completed_at: datetime | None = Field(default=None)

    def _with_status(self, status: PushStatus) -> list[TargetOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def updated(self) -> list[TargetOutcome]:
        return self._with_status(PushStatus.UPDATED)

    @property
    def up_to_date(self) -> list[TargetOutcome]:
        return self._with_status(PushStatus.UP_TO_DATE)

    @property
    def failed(self) -> list[tuple[Path, str]]:
        """Failed targets as (path, reason) pairs."""
        return [(o.path, o.reason or "unknown error") for o in self._with_status(PushStatus.FAILED)]

    @property
    def has_conflicts(self) -> bool:
        return any(o.conflicts for o in self.outcomes)

    @property
    def duration_seconds(self) -> float | None:
        """Calculate operation duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def summary(self) -> str:
        """One-line summary of the push."""
        return (
            f"Updated: {len(self.updated)} | "
            f"Already current: {len(self.up_to_date)} | "
            f"Failed: {len(self.failed)}"
        )


class PullReport(BaseModel):
    """Result of pulling managed files from one target into the framework."""

    source_path: Path
    new_files: list[ManagedFile] = Field(default_factory=list)
    modified_files: list[FileComparison] = Field(default_factory=list)
    unchanged_count: int = 0
    dry_run: bool = False

    @property
    def change_count(self) -> int:
        return len(self.new_files) + len(self.modified_files)


class TargetState(str, Enum):
    """Sync state of one target as shown by status."""

    UP_TO_DATE = "up_to_date"
    BEHIND = "behind"
    MISSING = "missing"
    UNKNOWN = "unknown"


class StatusRow(BaseModel):
    """Status of one registered target."""

    path: Path
    state: TargetState
    behind: int | None = Field(default=None, description="Commits behind (BEHIND only)")
    pinned: str = Field(default="", description="Pinned revision's log line, or a reason")

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def label(self) -> str:
        """Short text for the status column."""
        if self.state == TargetState.BEHIND:
            return f"{self.behind} BEHIND"
        return self.state.value.replace("_", " ").upper()


class StatusReport(BaseModel):
    """Framework revision plus one row per registered target."""

    framework_revision: str
    framework_message: str
    rows: list[StatusRow] = Field(default_factory=list)


class DiscoverResult(BaseModel):
    """Projects found by discover."""

    search_root: Path
    registered: list[Path] = Field(default_factory=list)
    already_registered: list[Path] = Field(default_factory=list)
    skipped: list[Path] = Field(
        default_factory=list,
        description="Linked directories that were not registered (the framework itself)",
    )

    @property
    def found(self) -> int:
        return len(self.registered) + len(self.already_registered)
