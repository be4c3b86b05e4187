"""
Content comparison between the framework and a target project.

Files are compared by SHA-256 of their bytes; modification times are never
consulted. Only files named by the manifest are considered, and nothing in
the target is ever deleted.
"""

from __future__ import annotations

import difflib
import hashlib
import logging
import shutil
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from fleetsync.core.config.models import ManagedCategory
from fleetsync.core.exceptions import SourceUnreadable, TargetUnreadable
from fleetsync.core.snapshot.models import (
    FileComparison,
    FileState,
    ManagedFile,
    SnapshotComparison,
)

logger = logging.getLogger(__name__)

SINGLETON_CATEGORY = "singleton"

# Unified diffs longer than this are truncated in reports
MAX_DIFF_LINES = 200


def fingerprint(path: Path) -> str:
    """Compute SHA-256 hash of file content for change detection."""
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _matches(name: str, category: ManagedCategory) -> bool:
    return PurePosixPath(name).match(category.pattern) and name not in category.exclude


def scan_managed_files(
    root: Path,
    categories: Iterable[ManagedCategory],
    singletons: Iterable[str] = (),
) -> dict[str, ManagedFile]:
    """
    List the managed files present under ``root``.

    Category roots are scanned one level deep (no recursion), matching the
    manifest patterns. Singletons are included only if they exist.

    Returns:
        Mapping of relative POSIX path to ManagedFile, in manifest order

    Raises:
        OSError: If a directory cannot be listed
    """
    found: dict[str, ManagedFile] = {}

    for category in categories:
        category_dir = root / category.root
        if not category_dir.is_dir():
            continue
        for entry in sorted(category_dir.iterdir(), key=lambda p: p.name):
            if not entry.is_file() or not _matches(entry.name, category):
                continue
            relative = f"{category.root}/{entry.name}"
            found[relative] = ManagedFile(
                relative_path=relative,
                category=category.name,
                executable=category.executable,
                pull_new=category.pull_new,
            )

    for singleton in singletons:
        relative = PurePosixPath(singleton).as_posix()
        if (root / relative).is_file():
            found[relative] = ManagedFile(relative_path=relative, category=SINGLETON_CATEGORY)

    return found


def diff_files(source: Path, target: Path, relative_path: str) -> tuple[str, list[str]]:
    """
    Describe how ``target`` differs from ``source``.

    Returns:
        Tuple of (summary, unified diff lines). Binary files get a summary
        and no diff lines.
    """
    try:
        source_lines = source.read_text(encoding="utf-8").splitlines(keepends=True)
        target_lines = target.read_text(encoding="utf-8").splitlines(keepends=True)
    except UnicodeDecodeError:
        return "binary content differs", []

    diff = list(
        difflib.unified_diff(
            source_lines,
            target_lines,
            fromfile=f"framework/{relative_path}",
            tofile=f"project/{relative_path}",
        )
    )
    added = sum(1 for line in diff if line.startswith("+") and not line.startswith("+++"))
    removed = sum(1 for line in diff if line.startswith("-") and not line.startswith("---"))

    if not added and not removed:
        summary = "whitespace or line-ending changes"
    else:
        summary = f"+{added} -{removed} lines"

    if len(diff) > MAX_DIFF_LINES:
        omitted = len(diff) - MAX_DIFF_LINES
        diff = diff[:MAX_DIFF_LINES] + [f"... ({omitted} more diff lines)\n"]

    return summary, [line.rstrip("\n") for line in diff]


def compare_snapshots(
    source_root: Path,
    target_root: Path,
    categories: Iterable[ManagedCategory],
    singletons: Iterable[str] = (),
) -> SnapshotComparison:
    """
    Classify every managed file of the framework against a target.

    Args:
        source_root: Framework (source-of-truth) directory
        target_root: Target project directory
        categories: Managed-file manifest
        singletons: Individual managed files outside the categories

    Returns:
        SnapshotComparison with one entry per framework file plus any
        target-only managed files

    Raises:
        SourceUnreadable: If the framework side cannot be read
        TargetUnreadable: If the target side cannot be read
    """
    categories = list(categories)
    singletons = list(singletons)

    if not source_root.is_dir():
        raise SourceUnreadable(f"Framework directory not found: {source_root}", source_root)
    if not target_root.is_dir():
        raise TargetUnreadable(f"Project directory not found: {target_root}", target_root)

    try:
        source_files = scan_managed_files(source_root, categories, singletons)
    except OSError as e:
        raise SourceUnreadable(f"Cannot scan {source_root}: {e}", source_root) from e

    try:
        target_files = scan_managed_files(target_root, categories)
    except OSError as e:
        raise TargetUnreadable(f"Cannot scan {target_root}: {e}", target_root) from e

    comparison = SnapshotComparison(source_root=source_root, target_root=target_root)

    for relative, managed in source_files.items():
        source_path = source_root / relative
        target_path = target_root / relative

        try:
            source_hash = fingerprint(source_path)
        except OSError as e:
            raise SourceUnreadable(f"Cannot read {source_path}: {e}", source_root) from e

        if not target_path.is_file():
            comparison.files.append(
                FileComparison(file=managed, state=FileState.MISSING_IN_TARGET)
            )
            continue

        try:
            target_hash = fingerprint(target_path)
        except OSError as e:
            raise TargetUnreadable(f"Cannot read {target_path}: {e}", target_root) from e

        if source_hash == target_hash:
            comparison.files.append(FileComparison(file=managed, state=FileState.IDENTICAL))
            continue

        try:
            summary, diff = diff_files(source_path, target_path, relative)
        except OSError as e:
            raise TargetUnreadable(f"Cannot read {target_path}: {e}", target_root) from e
        comparison.files.append(
            FileComparison(
                file=managed,
                state=FileState.DIVERGED_FROM_SOURCE,
                diff_summary=summary,
                diff=diff,
            )
        )

    comparison.untracked = [
        managed for relative, managed in target_files.items() if relative not in source_files
    ]

    logger.debug(
        "Compared %s against %s: %d changed, %d identical, %d untracked",
        target_root,
        source_root,
        len(comparison.changed),
        comparison.identical_count,
        len(comparison.untracked),
    )
    return comparison


def copy_managed_file(source_root: Path, dest_root: Path, managed: ManagedFile) -> Path:
    """
    Copy one managed file from ``source_root`` to ``dest_root``.

    Parent directories are created; executable categories get mode 0755.

    Returns:
        Path of the written file
    """
    source_path = source_root / managed.relative_path
    dest_path = dest_root / managed.relative_path
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source_path, dest_path)
    if managed.executable:
        dest_path.chmod(0o755)
    return dest_path
