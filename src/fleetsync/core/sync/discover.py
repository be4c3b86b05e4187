"""
Discover linked projects below a directory and register them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from fleetsync.core.config.models import FleetConfig
from fleetsync.core.registry import Registry, RegistrationOutcome
from fleetsync.core.sync.framework import Framework
from fleetsync.core.sync.models import DiscoverResult

logger = logging.getLogger(__name__)


def find_linked_projects(search_root: Path, marker_dir: str) -> Iterator[Path]:
    """
    Yield projects carrying ``marker_dir`` at most two levels below ``search_root``.

    The marker may sit directly in ``search_root`` (the root is itself a
    project) or in one of its immediate subdirectories. Unreadable
    directories are skipped.
    """
    if (search_root / marker_dir).is_dir():
        yield search_root

    try:
        children = sorted(search_root.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.warning("Cannot list %s: %s", search_root, e)
        return

    for child in children:
        try:
            if child.is_dir() and (child / marker_dir).is_dir():
                yield child
        except OSError as e:
            logger.debug("Skipping %s: %s", child, e)


def discover(
    config: FleetConfig,
    registry: Registry,
    search_root: Path | None = None,
) -> DiscoverResult:
    """
    Register every linked project under ``search_root``.

    The framework directory is never registered, even when it has the
    linkage layout itself.

    Args:
        config: Loaded configuration
        registry: Registry to add projects to
        search_root: Directory to scan (defaults to the framework's parent)

    Returns:
        DiscoverResult listing registered, already registered and skipped projects
    """
    framework = Framework(config)
    root = (search_root or framework.root.parent).expanduser().resolve()
    result = DiscoverResult(search_root=root)

    for project in find_linked_projects(root, config.marker_dir):
        project = project.resolve()
        if framework.is_same_directory(project):
            logger.debug("Skipping framework directory %s", project)
            result.skipped.append(project)
            continue

        registration = registry.register(project)
        if registration.outcome == RegistrationOutcome.REGISTERED:
            result.registered.append(registration.path)
        else:
            result.already_registered.append(registration.path)

    return result
