"""
Data models for the project registry.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class RegistrationOutcome(str, Enum):
    """What a register/unregister call did."""

    REGISTERED = "registered"
    ALREADY_REGISTERED = "already_registered"
    UNREGISTERED = "unregistered"
    NOT_REGISTERED = "not_registered"


class RegistrationResult(BaseModel):
    """Result of a register or unregister call."""

    path: Path = Field(description="Resolved project path")
    outcome: RegistrationOutcome

    @property
    def changed(self) -> bool:
        """Whether the registry file was rewritten."""
        return self.outcome in (RegistrationOutcome.REGISTERED, RegistrationOutcome.UNREGISTERED)
