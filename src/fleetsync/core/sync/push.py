"""
Push the framework to every registered target.

Targets are processed one at a time in registry order. For each target the
linkage submodule is moved to the framework revision, changed managed files
are copied over, the settings document is merged, and the result is
committed in the target. A target is up to date once the project has
committed the framework revision as its submodule pointer, so a target that
failed part-way is retried in full by the next push. A failure in one target
is recorded in the report and never stops the loop.

Push is authoritative for managed files: a target's local edit to a managed
file is overwritten. The only way to keep such an edit is to pull it into
the framework first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from fleetsync.core.config.models import FleetConfig
from fleetsync.core.exceptions import FleetSyncError, MergeConflict, TargetTimeout
from fleetsync.core.git import Deadline, Git
from fleetsync.core.registry import Registry
from fleetsync.core.settings import merge_settings_file
from fleetsync.core.snapshot import compare_snapshots, copy_managed_file
from fleetsync.core.sync.framework import Framework, FrameworkRevision
from fleetsync.core.sync.models import PushReport, PushStatus, TargetOutcome

logger = logging.getLogger(__name__)


class PushCoordinator:
    """
    Propagates the framework revision and managed files to all targets.

    Example:
        >>> coordinator = PushCoordinator(config, Registry(config.registry_file))
        >>> report = coordinator.push()
        >>> print(report.summary())
        Updated: 2 | Already current: 1 | Failed: 0
    """

    def __init__(self, config: FleetConfig, registry: Registry) -> None:
        self.config = config
        self.registry = registry
        self.framework = Framework(config)

    def push(
        self,
        *,
        publish: bool = False,
        on_outcome: Callable[[TargetOutcome], None] | None = None,
    ) -> PushReport:
        """
        Push to every registered target.

        Args:
            publish: Push the framework branch to its remote first
            on_outcome: Called after each target, for progress output

        Returns:
            PushReport with one outcome per target, in registry order

        Raises:
            FleetSyncError: If the framework revision cannot be read
        """
        revision = self.framework.revision()
        report = PushReport(framework_revision=revision.short, started_at=datetime.now())

        if publish:
            try:
                self.framework.publish()
            except FleetSyncError as e:
                logger.warning("Publishing framework failed: %s", e)
                report.publish_error = getattr(e, "stderr", "") or str(e)

        for project in self.registry:
            outcome = self.push_target(project, revision)
            report.outcomes.append(outcome)
            if on_outcome is not None:
                on_outcome(outcome)

        report.completed_at = datetime.now()
        logger.info("Push finished: %s", report.summary())
        return report

    def push_target(self, project: Path, revision: FrameworkRevision) -> TargetOutcome:
        """
        Push the framework to a single target, converting errors into a failed outcome.
        """
        try:
            return self._push_target(project, revision)
        except TargetTimeout:
            logger.warning("%s timed out after %ss", project, self.config.target_timeout)
            return TargetOutcome(
                path=project,
                status=PushStatus.FAILED,
                reason=f"timed out after {self.config.target_timeout}s",
            )
        except FleetSyncError as e:
            reason = getattr(e, "stderr", "") or str(e)
            logger.warning("Push to %s failed: %s", project, reason)
            return TargetOutcome(path=project, status=PushStatus.FAILED, reason=reason)
        except OSError as e:
            logger.warning("Push to %s failed: %s", project, e)
            return TargetOutcome(path=project, status=PushStatus.FAILED, reason=str(e))

    def _push_target(self, project: Path, revision: FrameworkRevision) -> TargetOutcome:
        marker = project / self.config.marker_dir

        if not project.is_dir():
            return TargetOutcome(
                path=project, status=PushStatus.FAILED, reason="project directory not found"
            )
        if not marker.is_dir():
            return TargetOutcome(
                path=project, status=PushStatus.FAILED, reason="submodule not found"
            )

        deadline = Deadline(self.config.target_timeout)
        submodule = Git(marker, timeout=self.config.git_timeout, deadline=deadline)
        if not submodule.is_toplevel():
            return TargetOutcome(
                path=project, status=PushStatus.FAILED, reason="submodule not initialized"
            )

        repo = Git(project, timeout=self.config.git_timeout, deadline=deadline)
        recorded = repo.gitlink(self.config.marker_dir)
        if recorded == revision.sha:
            logger.info("%s already at %s", project.name, revision.short)
            return TargetOutcome(
                path=project,
                status=PushStatus.UP_TO_DATE,
                from_revision=revision.short,
                to_revision=revision.short,
            )

        current = submodule.head()
        previous = recorded or current
        outcome = TargetOutcome(
            path=project,
            status=PushStatus.UPDATED,
            from_revision=(
                submodule.short(previous) if submodule.has_commit(previous) else previous[:7]
            ),
        )

        if current != revision.sha:
            if not submodule.has_commit(revision.sha):
                submodule.fetch(self.config.remote)
            if not submodule.has_commit(revision.sha):
                outcome.status = PushStatus.FAILED
                outcome.reason = (
                    f"framework revision {revision.short} not available from "
                    f"{self.config.remote} (publish the framework first)"
                )
                return outcome

            submodule.checkout_detached(revision.sha)
            new_head = submodule.head()
            if new_head != revision.sha:
                outcome.status = PushStatus.FAILED
                outcome.reason = (
                    f"update failed (at {submodule.short(new_head)}, expected {revision.short})"
                )
                return outcome
        outcome.to_revision = revision.short

        touched = self._copy_managed_files(project, outcome)
        touched.extend(self._merge_settings(project, outcome))

        # Submodule pointer is committed only when every document merged
        if outcome.conflicts:
            logger.warning(
                "%s: not recording %s until settings conflicts are resolved",
                project.name,
                revision.short,
            )
        else:
            touched.insert(0, self.config.marker_dir)

        repo.add(touched)
        if repo.has_staged_changes():
            message = self.config.commit_message.format(revision=revision.short)
            outcome.commit_sha = repo.commit(message)
            logger.info("%s committed %s", project.name, outcome.commit_sha)

        return outcome

    def _copy_managed_files(self, project: Path, outcome: TargetOutcome) -> list[str]:
        comparison = compare_snapshots(
            self.framework.root,
            project,
            self.config.categories,
            self.config.singletons,
        )
        copied: list[str] = []
        for item in comparison.changed:
            if item.relative_path == self.config.settings_file:
                continue
            copy_managed_file(self.framework.root, project, item.file)
            logger.debug("%s: copied %s (%s)", project.name, item.relative_path, item.state.value)
            copied.append(item.relative_path)
        outcome.files_copied = copied
        return list(copied)

    def _merge_settings(self, project: Path, outcome: TargetOutcome) -> list[str]:
        try:
            result = merge_settings_file(
                self.framework.root / self.config.settings_file,
                project / self.config.settings_file,
            )
        except MergeConflict as e:
            logger.warning("%s: settings left untouched: %s", project.name, e)
            outcome.conflicts.append(str(e))
            return []

        outcome.settings = result
        if result is not None and result.changed:
            return [self.config.settings_file]
        return []
