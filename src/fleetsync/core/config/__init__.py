"""
Configuration models and loading.

This module provides Pydantic models for fleetsync configuration
with multi-layer merging: defaults < user < env vars < CLI options.
"""

from .env import load_layered_env
from .loader import (
    apply_env_overrides,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import FleetConfig, ManagedCategory, default_categories

__all__ = [
    # Models
    "FleetConfig",
    "ManagedCategory",
    "default_categories",
    # Loader functions
    "apply_env_overrides",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    "load_layered_env",
]
