"""
Registry of target projects linked to the framework.

Example:
    >>> from fleetsync.core.registry import Registry
    >>> registry = Registry(Path.home() / ".fleetsync" / "projects.txt")
    >>> result = registry.register(Path.cwd())
    >>> result.outcome
    <RegistrationOutcome.REGISTERED: 'registered'>
"""

from fleetsync.core.registry.models import RegistrationOutcome, RegistrationResult
from fleetsync.core.registry.store import Registry

__all__ = ["Registry", "RegistrationOutcome", "RegistrationResult"]
