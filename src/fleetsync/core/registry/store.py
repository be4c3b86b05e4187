"""
Registry of target projects, persisted as a plain-text list of paths.

The file holds one absolute path per line. Blank lines and lines starting
with ``#`` are ignored when listing and kept in place when the file is
rewritten. The file is loaded fresh on every call; writes go through a
temporary file followed by a rename.

Concurrent invocations from separate processes are not coordinated: two
processes registering at the same time can lose one update.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from fleetsync.core.exceptions import NotLinked, RegistryError
from fleetsync.core.registry.models import RegistrationOutcome, RegistrationResult

logger = logging.getLogger(__name__)


def _is_entry(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#")


class Registry:
    """
    Store for registered target projects.

    Iterating a Registry reads the file anew, so every iteration sees the
    current contents and can be restarted at will.

    Example:
        >>> registry = Registry(Path.home() / ".fleetsync" / "projects.txt")
        >>> registry.register(Path("~/src/my-app").expanduser())
        >>> for project in registry:
        ...     print(project)
    """

    def __init__(self, file_path: Path, marker_dir: str = ".claude-framework") -> None:
        """
        Initialize Registry.

        Args:
            file_path: Location of the registry file
            marker_dir: Directory name proving a project is linked to the framework
        """
        self.file_path = file_path
        self.marker_dir = marker_dir

    def __iter__(self) -> Iterator[Path]:
        return self.list()

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, Path):
            return False
        target = path.expanduser().resolve()
        return any(entry == target for entry in self.list())

    def _read_lines(self) -> list[str]:
        if not self.file_path.exists():
            return []
        try:
            return self.file_path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise RegistryError(f"Cannot read registry {self.file_path}: {e}") from e

    def _write_lines(self, lines: list[str]) -> None:
        temp_path = self.file_path.with_name(self.file_path.name + ".tmp")
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            content = "\n".join(lines) + "\n" if lines else ""
            temp_path.write_text(content, encoding="utf-8")
            temp_path.replace(self.file_path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise RegistryError(f"Cannot write registry {self.file_path}: {e}") from e

    def list(self) -> Iterator[Path]:
        """
        Yield registered paths in file order.

        Returns:
            A fresh generator over the registry file
        """
        for line in self._read_lines():
            if _is_entry(line):
                yield Path(line.strip())

    def is_linked(self, path: Path) -> bool:
        """Whether ``path`` carries the linkage marker directory."""
        return (path / self.marker_dir).is_dir()

    def register(self, path: Path) -> RegistrationResult:
        """
        Add a project to the registry.

        Args:
            path: Project directory (resolved to an absolute path)

        Returns:
            RegistrationResult with outcome REGISTERED or ALREADY_REGISTERED

        Raises:
            NotLinked: If the project lacks the linkage marker
            RegistryError: If the registry file cannot be read or written
        """
        project = path.expanduser().resolve()
        if not self.is_linked(project):
            raise NotLinked(project, self.marker_dir)

        lines = self._read_lines()
        if any(_is_entry(line) and Path(line.strip()) == project for line in lines):
            logger.info("Already registered: %s", project)
            return RegistrationResult(path=project, outcome=RegistrationOutcome.ALREADY_REGISTERED)

        lines.append(str(project))
        self._write_lines(lines)
        logger.info("Registered: %s", project)
        return RegistrationResult(path=project, outcome=RegistrationOutcome.REGISTERED)

    def unregister(self, path: Path) -> RegistrationResult:
        """
        Remove a project from the registry.

        Returns:
            RegistrationResult with outcome UNREGISTERED or NOT_REGISTERED
        """
        project = path.expanduser().resolve()
        lines = self._read_lines()
        kept = [
            line for line in lines if not (_is_entry(line) and Path(line.strip()) == project)
        ]

        if len(kept) == len(lines):
            logger.info("Not registered: %s", project)
            return RegistrationResult(path=project, outcome=RegistrationOutcome.NOT_REGISTERED)

        self._write_lines(kept)
        logger.info("Unregistered: %s", project)
        return RegistrationResult(path=project, outcome=RegistrationOutcome.UNREGISTERED)
