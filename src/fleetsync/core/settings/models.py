"""
Schema of the Claude settings document (.claude/settings.json).

The document has two merged namespaces:
    env   - scalar settings, framework values win
    hooks - event name -> ordered list of trigger entries

A trigger entry is either a direct command::

    {"type": "command", "command": "bash .claude/hooks/lint.sh"}

or a grouping of commands::

    {"matcher": "Edit|Write", "hooks": [{"type": "command", "command": "..."}]}

Every other top-level key is carried through untouched.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SettingsDocument(BaseModel):
    """Validation schema for the merged namespaces of a settings document."""

    model_config = ConfigDict(extra="allow", strict=True)

    env: dict[str, Any] = Field(default_factory=dict)
    hooks: dict[str, list[Any]] = Field(default_factory=dict)


class SettingsMergeResult(BaseModel):
    """Outcome of merging the framework settings into a project's settings."""

    file_path: str = Field(description="Project settings file")
    created: bool = Field(default=False, description="File did not exist and was copied")
    changed: bool = Field(default=False, description="File content was rewritten")
    env_keys_set: list[str] = Field(
        default_factory=list,
        description="env keys added or overwritten with framework values",
    )
    hooks_added: list[str] = Field(
        default_factory=list,
        description="Added trigger entries as 'Event: command'",
    )
    keys_added: list[str] = Field(
        default_factory=list,
        description="Top-level keys copied because the project lacked them",
    )
