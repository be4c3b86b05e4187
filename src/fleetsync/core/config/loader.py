"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < env vars < explicit overrides (CLI options)
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import FleetConfig

logger = logging.getLogger(__name__)

ENV_FRAMEWORK_DIR = "FLEETSYNC_FRAMEWORK_DIR"
ENV_REGISTRY = "FLEETSYNC_REGISTRY"
ENV_MARKER = "FLEETSYNC_MARKER"
ENV_GIT_TIMEOUT = "FLEETSYNC_GIT_TIMEOUT"
ENV_TARGET_TIMEOUT = "FLEETSYNC_TARGET_TIMEOUT"


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/fleetsync/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "fleetsync" / "config.json"


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            logger.warning("Ignoring config at %s: top level is not an object", path)
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def _env_int(name: str) -> int | None:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s value '%s', ignoring", name, raw)
        return None
    if value < 1:
        logger.warning("%s must be >= 1, got %d, ignoring", name, value)
        return None
    return value


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        FLEETSYNC_FRAMEWORK_DIR - overrides framework_dir
        FLEETSYNC_REGISTRY - overrides registry_file
        FLEETSYNC_MARKER - overrides marker_dir
        FLEETSYNC_GIT_TIMEOUT - overrides git_timeout
        FLEETSYNC_TARGET_TIMEOUT - overrides target_timeout

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if framework_dir := os.environ.get(ENV_FRAMEWORK_DIR):
        result["framework_dir"] = framework_dir
    if registry := os.environ.get(ENV_REGISTRY):
        result["registry_file"] = registry
    if marker := os.environ.get(ENV_MARKER):
        result["marker_dir"] = marker
    if (git_timeout := _env_int(ENV_GIT_TIMEOUT)) is not None:
        result["git_timeout"] = git_timeout
    if (target_timeout := _env_int(ENV_TARGET_TIMEOUT)) is not None:
        result["target_timeout"] = target_timeout

    return result


def load_config(overrides: dict[str, Any] | None = None) -> FleetConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Explicit overrides (CLI options); None values are skipped
        2. Environment variables (FLEETSYNC_*)
        3. User config (~/.config/fleetsync/config.json)
        4. Model defaults

    Raises:
        ValidationError: If the merged config fails Pydantic validation

    Example:
        >>> config = load_config({"marker_dir": ".framework"})
        >>> config.marker_dir
        '.framework'
    """
    merged: dict[str, Any] = {}

    if user_config := load_json_file(get_user_config_path()):
        merged.update(user_config)

    merged = apply_env_overrides(merged)

    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    return FleetConfig(**merged)
