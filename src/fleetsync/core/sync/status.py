"""
Read-only status of every registered target.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fleetsync.core.config.models import FleetConfig
from fleetsync.core.exceptions import FleetSyncError, TargetTimeout
from fleetsync.core.git import Deadline, Git
from fleetsync.core.registry import Registry
from fleetsync.core.sync.framework import Framework, FrameworkRevision
from fleetsync.core.sync.models import StatusReport, StatusRow, TargetState

logger = logging.getLogger(__name__)


class StatusReporter:
    """
    Compares each target's pinned submodule revision with the framework.

    A row is produced for every target; errors become UNKNOWN rows.

    Example:
        >>> report = StatusReporter(config, registry).report()
        >>> [(row.name, row.label) for row in report.rows]
        [('app', 'UP TO DATE'), ('api', '3 BEHIND')]
    """

    def __init__(self, config: FleetConfig, registry: Registry) -> None:
        self.config = config
        self.registry = registry
        self.framework = Framework(config)

    def report(self, *, fetch: bool = True) -> StatusReport:
        """
        Build the status report.

        Args:
            fetch: Fetch the submodule remote before counting commits behind

        Raises:
            FleetSyncError: If the framework revision cannot be read
        """
        revision = self.framework.revision()
        report = StatusReport(framework_revision=revision.short, framework_message=revision.message)
        for project in self.registry:
            report.rows.append(self.target_status(project, revision, fetch=fetch))
        return report

    def target_status(
        self, project: Path, revision: FrameworkRevision, *, fetch: bool = True
    ) -> StatusRow:
        marker = project / self.config.marker_dir
        if not marker.is_dir():
            return StatusRow(path=project, state=TargetState.MISSING, pinned="submodule not found")

        submodule = Git(
            marker,
            timeout=self.config.git_timeout,
            deadline=Deadline(self.config.target_timeout),
        )
        try:
            return self._compare(project, submodule, revision, fetch=fetch)
        except TargetTimeout:
            return StatusRow(
                path=project,
                state=TargetState.UNKNOWN,
                pinned=f"timed out after {self.config.target_timeout}s",
            )
        except (FleetSyncError, OSError, ValueError) as e:
            reason = getattr(e, "stderr", "") or str(e)
            logger.debug("Status of %s unknown: %s", project, reason)
            return StatusRow(path=project, state=TargetState.UNKNOWN, pinned=reason)

    def _compare(
        self, project: Path, submodule: Git, revision: FrameworkRevision, *, fetch: bool
    ) -> StatusRow:
        if not submodule.is_toplevel():
            return StatusRow(
                path=project, state=TargetState.UNKNOWN, pinned="submodule not initialized"
            )

        pinned_sha = submodule.head()
        pinned_msg = submodule.oneline()

        if pinned_sha == revision.sha:
            return StatusRow(path=project, state=TargetState.UP_TO_DATE, pinned=pinned_msg)

        if fetch:
            submodule.fetch(self.config.remote)

        if not submodule.has_commit(revision.sha):
            return StatusRow(
                path=project,
                state=TargetState.UNKNOWN,
                pinned=f"{pinned_msg} (framework {revision.short} not fetched)",
            )

        behind = submodule.count_between("HEAD", revision.sha)
        if behind == 0:
            # Pinned revision is ahead of or unrelated to the framework checkout
            return StatusRow(
                path=project,
                state=TargetState.UNKNOWN,
                pinned=f"{pinned_msg} (not an ancestor of {revision.short})",
            )
        return StatusRow(
            path=project, state=TargetState.BEHIND, behind=behind, pinned=pinned_msg
        )
