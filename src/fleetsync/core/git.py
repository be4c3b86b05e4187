"""
Thin git wrapper used by the sync coordinators.

Every command runs as a subprocess in a fixed repository directory. Each
call is bounded by a per-command timeout and, optionally, by a shared
``Deadline`` so that all git work for one target fits a single time budget.
"""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path

from fleetsync.core.exceptions import GitError, TargetTimeout

logger = logging.getLogger(__name__)


class Deadline:
    """
    A monotonic time budget shared by several operations.

    Example:
        >>> deadline = Deadline(300)
        >>> deadline.remaining() <= 300
        True
    """

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        self._expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        """Seconds left before expiry (never negative)."""
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0


class Git:
    """
    Run git commands in one repository.

    Example:
        >>> git = Git(Path("/path/to/project/.claude-framework"), timeout=60)
        >>> git.short_head()
        'a1b2c3d'
    """

    def __init__(
        self,
        repo_dir: Path,
        *,
        timeout: float = 60,
        deadline: Deadline | None = None,
    ) -> None:
        self.repo_dir = repo_dir
        self.timeout = timeout
        self.deadline = deadline

    def _effective_timeout(self, cmd: list[str]) -> float:
        if self.deadline is None:
            return self.timeout
        remaining = self.deadline.remaining()
        if remaining <= 0:
            raise TargetTimeout(
                f"Timed out after {self.deadline.seconds:g}s before: {' '.join(cmd)}",
                command=cmd,
            )
        return min(self.timeout, remaining)

    def run(self, args: list[str], *, check: bool = True) -> str:
        """
        Run a git command and return its stdout.

        Args:
            args: Git command arguments (without "git" prefix).
            check: Whether to raise on non-zero exit code.

        Returns:
            Command stdout as string (stripped).

        Raises:
            GitError: If the command fails and check=True.
            TargetTimeout: If the command exceeds the shared deadline.
        """
        cmd = ["git"] + args
        timeout = self._effective_timeout(cmd)

        logger.debug("Running git command in %s: %s", self.repo_dir, " ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                cwd=self.repo_dir,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            if self.deadline is not None and self.deadline.expired:
                raise TargetTimeout(
                    f"Timed out after {self.deadline.seconds:g}s: {' '.join(cmd)}",
                    command=cmd,
                ) from e
            raise GitError(f"Git command timed out: {' '.join(cmd)}", command=cmd) from e
        except FileNotFoundError as e:
            raise GitError("git not found in PATH", command=cmd) from e
        except NotADirectoryError as e:
            raise GitError(f"Not a directory: {self.repo_dir}", command=cmd) from e

        if check and result.returncode != 0:
            stderr = result.stderr.strip() if result.stderr else ""
            raise GitError(
                f"Git command failed: {' '.join(cmd)}",
                command=cmd,
                stderr=stderr,
            )

        return result.stdout.strip() if result.stdout else ""

    def succeeds(self, args: list[str]) -> bool:
        """Return True when the command exits with status 0."""
        try:
            self.run(args)
            return True
        except TargetTimeout:
            raise
        except GitError:
            return False

    def is_toplevel(self) -> bool:
        """
        Whether ``repo_dir`` is itself the root of a git work tree.

        An uninitialised submodule directory is not: git would silently
        resolve commands against the enclosing project instead.
        """
        try:
            top = self.run(["rev-parse", "--show-toplevel"])
        except TargetTimeout:
            raise
        except GitError:
            return False
        return Path(top).resolve() == self.repo_dir.resolve()

    def head(self) -> str:
        """Full SHA of HEAD."""
        return self.run(["rev-parse", "HEAD"])

    def short_head(self) -> str:
        """Abbreviated SHA of HEAD."""
        return self.run(["rev-parse", "--short", "HEAD"])

    def short(self, revision: str) -> str:
        """Abbreviate any revision."""
        return self.run(["rev-parse", "--short", revision])

    def oneline(self, revision: str = "HEAD") -> str:
        """One-line log message (``<short-sha> <subject>``) for a revision."""
        return self.run(["log", "--oneline", "-1", revision])

    def fetch(self, remote: str = "origin") -> None:
        self.run(["fetch", remote])

    def has_commit(self, revision: str) -> bool:
        """Whether the object exists locally and is a commit."""
        return self.succeeds(["cat-file", "-e", f"{revision}^{{commit}}"])

    def gitlink(self, path: str, revision: str = "HEAD") -> str | None:
        """
        Commit recorded for the submodule at ``path`` in ``revision``.

        Returns None when the repository has no commits yet or ``path`` is
        not recorded as a submodule.
        """
        if not self.has_commit(revision):
            return None
        parts = self.run(["ls-tree", revision, "--", path]).split()
        if len(parts) < 3 or parts[1] != "commit":
            return None
        return parts[2]

    def checkout_detached(self, revision: str) -> None:
        self.run(["checkout", "--quiet", "--detach", revision])

    def count_between(self, base: str, tip: str) -> int:
        """Number of commits reachable from ``tip`` but not from ``base``."""
        return int(self.run(["rev-list", "--count", f"{base}..{tip}"]))

    def push(self, remote: str, branch: str) -> None:
        self.run(["push", remote, branch])

    def add(self, paths: list[str]) -> None:
        """Stage the given paths, skipping any that do not exist."""
        existing = [p for p in paths if (self.repo_dir / p).exists()]
        if existing:
            self.run(["add", "--"] + existing)

    def has_staged_changes(self) -> bool:
        """True when the index differs from HEAD."""
        return not self.succeeds(["diff", "--cached", "--quiet"])

    def commit(self, message: str) -> str:
        """Commit the index and return the new short SHA."""
        self.run(["commit", "--quiet", "-m", message])
        return self.short_head()
