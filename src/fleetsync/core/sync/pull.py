"""
Pull managed files from one target back into the framework.

This is the reverse of push and deliberately asymmetric with it: on pull
the target's copy wins. It upstreams an improvement made inside a project
so that the next push propagates it everywhere else. Push never calls
into this module.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fleetsync.core.config.models import FleetConfig
from fleetsync.core.exceptions import NoManagedDirectory
from fleetsync.core.snapshot import FileState, compare_snapshots, copy_managed_file
from fleetsync.core.sync.framework import Framework
from fleetsync.core.sync.models import PullReport

logger = logging.getLogger(__name__)


class PullCoordinator:
    """
    Copies new and modified managed files from a target into the framework.

    Files that exist in the framework but not in the target are left alone,
    and singleton files are never pulled.

    Example:
        >>> report = PullCoordinator(config).pull(Path("~/src/my-app").expanduser())
        >>> [f.relative_path for f in report.modified_files]
        ['.claude/agents/reviewer.md']
    """

    def __init__(self, config: FleetConfig) -> None:
        self.config = config
        self.framework = Framework(config)

    def has_managed_directory(self, project: Path) -> bool:
        return any((project / c.root).is_dir() for c in self.config.categories)

    def pull(self, target: Path, *, dry_run: bool = False) -> PullReport:
        """
        Pull managed files from ``target``.

        Args:
            target: Project directory to pull from
            dry_run: Report what would be pulled without copying

        Returns:
            PullReport listing new and modified files

        Raises:
            NoManagedDirectory: If the target has none of the managed directories
            SourceUnreadable, TargetUnreadable: If either side cannot be read
        """
        project = target.expanduser().resolve()
        self.framework.ensure_exists()

        if not self.has_managed_directory(project):
            raise NoManagedDirectory(project)

        comparison = compare_snapshots(self.framework.root, project, self.config.categories)
        report = PullReport(
            source_path=project,
            unchanged_count=comparison.identical_count,
            dry_run=dry_run,
        )

        for managed in comparison.untracked:
            if not managed.pull_new:
                logger.debug("Not pulling %s: category %s", managed.relative_path, managed.category)
                continue
            report.new_files.append(managed)
            if not dry_run:
                copy_managed_file(project, self.framework.root, managed)
                logger.info("Pulled new file %s from %s", managed.relative_path, project.name)

        for item in comparison.with_state(FileState.DIVERGED_FROM_SOURCE):
            report.modified_files.append(item)
            if not dry_run:
                copy_managed_file(project, self.framework.root, item.file)
                logger.info(
                    "Pulled modified file %s from %s (%s)",
                    item.relative_path,
                    project.name,
                    item.diff_summary,
                )

        if report.change_count == 0:
            logger.info("Nothing to pull from %s", project)

        return report
