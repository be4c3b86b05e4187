"""
Field-wise merging of the Claude settings document.

Example:
    >>> from fleetsync.core.settings import merge_settings_file
    >>> result = merge_settings_file(
    ...     framework / ".claude" / "settings.json",
    ...     project / ".claude" / "settings.json",
    ... )
    >>> result.hooks_added
    ['PostToolUse: bash .claude/hooks/format.sh']
"""

from fleetsync.core.settings.merge import (
    entry_commands,
    merge_documents,
    merge_settings_file,
    validate_document,
)
from fleetsync.core.settings.models import SettingsDocument, SettingsMergeResult

__all__ = [
    "SettingsDocument",
    "SettingsMergeResult",
    "entry_commands",
    "merge_documents",
    "merge_settings_file",
    "validate_document",
]
