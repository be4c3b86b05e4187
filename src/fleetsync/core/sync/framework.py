"""
Access to the framework (source-of-truth) repository.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from fleetsync.core.config.models import FleetConfig
from fleetsync.core.exceptions import FleetSyncError
from fleetsync.core.git import Git

logger = logging.getLogger(__name__)


@dataclass
class FrameworkRevision:
    """Current revision of the framework checkout.

    Attributes:
        sha: Full commit SHA
        short: Abbreviated SHA used in messages
        message: One-line log entry (``<short> <subject>``)
    """

    sha: str
    short: str
    message: str


class Framework:
    """The framework checkout whose managed files are pushed to targets."""

    def __init__(self, config: FleetConfig) -> None:
        self.config = config
        self.root = config.resolved_framework_dir()
        self.git = Git(self.root, timeout=config.git_timeout)

    def ensure_exists(self) -> None:
        """
        Raises:
            FleetSyncError: If the framework directory is missing
        """
        if not self.root.is_dir():
            raise FleetSyncError(f"Framework directory not found: {self.root}")

    def revision(self) -> FrameworkRevision:
        """
        Read the framework's current revision.

        Raises:
            FleetSyncError: If the directory is missing
            GitError: If it is not a git repository with at least one commit
        """
        self.ensure_exists()
        sha = self.git.head()
        return FrameworkRevision(
            sha=sha,
            short=self.git.short(sha),
            message=self.git.oneline(sha),
        )

    def publish(self) -> None:
        """Push the framework branch to its remote so targets can fetch it."""
        logger.info("Publishing framework %s to %s", self.config.branch, self.config.remote)
        self.git.push(self.config.remote, self.config.branch)

    def is_same_directory(self, path: Path) -> bool:
        return path.expanduser().resolve() == self.root
