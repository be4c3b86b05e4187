"""
Fleet synchronisation between the framework and registered projects.

Push propagates the framework revision and managed files to every
registered project; pull upstreams a project's edits into the framework;
status reports how far each project lags behind.

Example:
    >>> from fleetsync.core.sync import PushCoordinator
    >>> report = PushCoordinator(config, registry).push()
    >>> for target, reason in report.failed:
    ...     print(f"{target}: {reason}")
"""

from fleetsync.core.sync.discover import discover, find_linked_projects
from fleetsync.core.sync.framework import Framework, FrameworkRevision
from fleetsync.core.sync.models import (
    DiscoverResult,
    PullReport,
    PushReport,
    PushStatus,
    StatusReport,
    StatusRow,
    TargetOutcome,
    TargetState,
)
from fleetsync.core.sync.pull import PullCoordinator
from fleetsync.core.sync.push import PushCoordinator
from fleetsync.core.sync.status import StatusReporter

__all__ = [
    "DiscoverResult",
    "Framework",
    "FrameworkRevision",
    "PullCoordinator",
    "PullReport",
    "PushCoordinator",
    "PushReport",
    "PushStatus",
    "StatusReport",
    "StatusReporter",
    "StatusRow",
    "TargetOutcome",
    "TargetState",
    "discover",
    "find_linked_projects",
]
