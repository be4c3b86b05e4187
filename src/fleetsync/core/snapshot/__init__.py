"""
Snapshot comparison of managed files.

Example:
    >>> from fleetsync.core.snapshot import compare_snapshots
    >>> comparison = compare_snapshots(framework, project, config.categories)
    >>> for item in comparison.changed:
    ...     print(item.relative_path, item.state.value)
"""

from fleetsync.core.snapshot.comparator import (
    compare_snapshots,
    copy_managed_file,
    diff_files,
    fingerprint,
    scan_managed_files,
)
from fleetsync.core.snapshot.models import (
    FileComparison,
    FileState,
    ManagedFile,
    SnapshotComparison,
)

__all__ = [
    "FileComparison",
    "FileState",
    "ManagedFile",
    "SnapshotComparison",
    "compare_snapshots",
    "copy_managed_file",
    "diff_files",
    "fingerprint",
    "scan_managed_files",
]
