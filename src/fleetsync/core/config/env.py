"""
FLEETSYNC_* settings from .env files.

Files are read lowest to highest:
- $XDG_CONFIG_HOME/fleetsync/.env
- <project>/.env
- <project>/.env.local

A later file replaces an earlier one's value. A variable already exported in
the shell is never replaced, and keys without the FLEETSYNC_ prefix are
ignored.
"""

import logging
import os
from pathlib import Path

from dotenv import dotenv_values

from .loader import get_xdg_config_home

logger = logging.getLogger(__name__)

ENV_PREFIX = "FLEETSYNC_"


def env_file_paths(project_dir: Path | None = None, user_env: Path | None = None) -> list[Path]:
    """Candidate .env files in precedence order, lowest first."""
    if project_dir is None:
        project_dir = Path.cwd()
    if user_env is None:
        user_env = get_xdg_config_home() / "fleetsync" / ".env"
    return [user_env, project_dir / ".env", project_dir / ".env.local"]


def read_env_file(path: Path) -> dict[str, str]:
    """FLEETSYNC_* entries of one .env file; empty when the file is missing."""
    if not path.is_file():
        return {}
    return {
        key: value
        for key, value in dotenv_values(path).items()
        if key.startswith(ENV_PREFIX) and value is not None
    }


def load_layered_env(
    project_dir: Path | None = None, *, user_env: Path | None = None
) -> dict[str, str]:
    """
    Export FLEETSYNC_* values from .env files into the process environment.

    Args:
        project_dir: Directory holding .env and .env.local (defaults to cwd)
        user_env: User-level .env file (defaults to the XDG location)

    Returns:
        The variables that were set
    """
    merged: dict[str, str] = {}
    for path in env_file_paths(project_dir, user_env):
        merged.update(read_env_file(path))

    applied = {key: value for key, value in merged.items() if key not in os.environ}
    os.environ.update(applied)
    if applied:
        logger.debug("Loaded %s from .env files", ", ".join(sorted(applied)))
    return applied
