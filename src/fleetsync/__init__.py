"""
fleetsync - Claude framework fleet synchronisation

A CLI tool that keeps consumer projects linked to a framework repository
(through a git submodule) in step with the framework's agents, commands,
hooks and scripts.
"""

__version__ = "0.3.0.dev0"

from fleetsync.core.config.models import FleetConfig, ManagedCategory

__all__ = ["FleetConfig", "ManagedCategory", "__version__"]
