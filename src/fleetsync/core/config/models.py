"""
Configuration data models for fleetsync.

These models define the structure of ~/.config/fleetsync/config.json,
with validation and type safety via Pydantic.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ManagedCategory(BaseModel):
    """
    A family of managed files living under one directory.

    Every file directly inside ``root`` whose name matches ``pattern`` is
    pushed to targets and may be pulled back from them.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Category name shown in reports (e.g. 'agents')")
    root: str = Field(description="Directory relative to the project root")
    pattern: str = Field(default="*", description="Glob pattern for file names")
    executable: bool = Field(
        default=False,
        description="Mark copied files executable (hooks and scripts)",
    )
    pull_new: bool = Field(
        default=True,
        description="Pull files that exist only in the target back into the framework",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="File names never synced even when they match the pattern",
    )

    @field_validator("root")
    @classmethod
    def validate_root(cls, v: str) -> str:
        """Roots must stay inside the project."""
        if Path(v).is_absolute() or ".." in Path(v).parts:
            raise ValueError(f"category root must be a relative path inside the project: {v}")
        return v.strip("/")


def default_categories() -> list[ManagedCategory]:
    """Managed categories of the Claude framework layout."""
    return [
        ManagedCategory(name="agents", root=".claude/agents", pattern="*.md"),
        ManagedCategory(name="commands", root=".claude/commands", pattern="*.md"),
        ManagedCategory(name="hooks", root=".claude/hooks", pattern="*.sh", executable=True),
        ManagedCategory(
            name="scripts",
            root="scripts",
            pattern="*.sh",
            executable=True,
            pull_new=False,
            exclude=["sync.sh"],
        ),
    ]


class FleetConfig(BaseModel):
    """
    Main fleetsync configuration model.

    Combines all settings with sensible defaults. Loaded from the user
    config file and environment variables, then overridden by CLI options.

    Example:
        >>> config = FleetConfig(framework_dir=Path("~/src/claude-framework"))
        >>> config.marker_dir
        '.claude-framework'
    """

    model_config = ConfigDict(extra="ignore")

    framework_dir: Optional[Path] = Field(
        default=None,
        description="Framework (source-of-truth) repository; defaults to the cwd",
    )
    registry_file: Path = Field(
        default_factory=lambda: Path.home() / ".fleetsync" / "projects.txt",
        description="Newline-delimited list of registered project paths",
    )
    marker_dir: str = Field(
        default=".claude-framework",
        description="Submodule directory that links a project to the framework",
    )
    remote: str = Field(default="origin", description="Remote fetched inside the submodule")
    branch: str = Field(default="master", description="Framework branch to publish")
    git_timeout: int = Field(
        default=60,
        ge=1,
        description="Timeout in seconds for a single git command",
    )
    target_timeout: int = Field(
        default=300,
        ge=1,
        description="Total time budget in seconds for one target during push",
    )
    settings_file: str = Field(
        default=".claude/settings.json",
        description="Structured settings document merged instead of overwritten",
    )
    commit_message: str = Field(
        default="chore: update claude framework to {revision}",
        description="Commit message template; {revision} is the short framework revision",
    )
    categories: list[ManagedCategory] = Field(default_factory=default_categories)
    singletons: list[str] = Field(
        default_factory=lambda: ["docs/CODE-STANDARDS.md"],
        description="Individual files pushed to targets but never pulled back",
    )

    @field_validator("framework_dir", "registry_file", mode="before")
    @classmethod
    def expand_user(cls, v: object) -> object:
        """Allow ~ in configured paths."""
        if isinstance(v, str):
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v

    @field_validator("commit_message")
    @classmethod
    def validate_commit_message(cls, v: str) -> str:
        """The template must name the revision it propagates."""
        if "{revision}" not in v:
            raise ValueError("commit_message must contain '{revision}'")
        return v

    def resolved_framework_dir(self) -> Path:
        """Framework directory as an absolute path."""
        return (self.framework_dir or Path.cwd()).resolve()
