"""
Merge engine for the Claude settings document.

Merges the framework's .claude/settings.json into a project's copy without
destroying project customisations:

    - env: every framework key is written, project-only keys are kept
    - hooks: missing events are copied whole; for existing events only
      entries whose command strings are all new are appended at the end
    - other top-level keys: copied only when the project lacks them

Entries are matched by command string, not by full structure, so the same
command with a different matcher or timeout is never added twice. An entry
with no command string is always appended.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from fleetsync.core.exceptions import MergeConflict
from fleetsync.core.settings.models import SettingsDocument, SettingsMergeResult

logger = logging.getLogger(__name__)

ENV_KEY = "env"
HOOKS_KEY = "hooks"


def validate_document(data: Any, label: str = "settings") -> dict[str, Any]:
    """
    Check that ``data`` has the settings document shape.

    Raises:
        MergeConflict: If the top level is not an object or a merged
            namespace has the wrong type
    """
    if not isinstance(data, dict):
        raise MergeConflict(f"{label}: top level must be a JSON object")
    try:
        SettingsDocument.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise MergeConflict(f"{label}: {problems}") from e
    return data


def entry_commands(entry: Any) -> set[str]:
    """
    Command strings of a trigger entry.

    Looks at a direct ``command`` and one level into a ``hooks`` grouping.
    """
    commands: set[str] = set()
    if not isinstance(entry, dict):
        return commands
    command = entry.get("command")
    if isinstance(command, str):
        commands.add(command)
    nested = entry.get("hooks")
    if isinstance(nested, list):
        for hook in nested:
            if isinstance(hook, dict) and isinstance(hook.get("command"), str):
                commands.add(hook["command"])
    return commands


def _describe(event: str, entry: Any) -> str:
    commands = sorted(entry_commands(entry))
    return f"{event}: {', '.join(commands) if commands else '<no command>'}"


def merge_documents(
    existing: dict[str, Any],
    incoming: dict[str, Any],
    result: SettingsMergeResult | None = None,
) -> dict[str, Any]:
    """
    Merge the framework document ``incoming`` into the project document ``existing``.

    Neither argument is modified. When ``result`` is given, it is filled in
    with what the merge added.

    Returns:
        The merged document

    Raises:
        MergeConflict: If either document has the wrong shape

    Example:
        >>> merge_documents(
        ...     {"env": {"A": "1"}, "hooks": {"Stop": [{"command": "x"}]}},
        ...     {"env": {"B": "2"}, "hooks": {"Stop": [{"command": "x"}, {"command": "y"}]}},
        ... )
        {'env': {'A': '1', 'B': '2'}, 'hooks': {'Stop': [{'command': 'x'}, {'command': 'y'}]}}
    """
    validate_document(existing, "project settings")
    validate_document(incoming, "framework settings")

    merged = copy.deepcopy(existing)

    for key, value in incoming.items():
        if key in (ENV_KEY, HOOKS_KEY) or key in merged:
            continue
        merged[key] = copy.deepcopy(value)
        if result is not None:
            result.keys_added.append(key)

    if ENV_KEY in incoming:
        env = merged.setdefault(ENV_KEY, {})
        for key, value in incoming[ENV_KEY].items():
            if key not in env or env[key] != value:
                env[key] = copy.deepcopy(value)
                if result is not None:
                    result.env_keys_set.append(key)

    if HOOKS_KEY in incoming:
        hooks = merged.setdefault(HOOKS_KEY, {})
        for event, entries in incoming[HOOKS_KEY].items():
            if event not in hooks:
                hooks[event] = copy.deepcopy(entries)
                if result is not None:
                    result.hooks_added.extend(_describe(event, e) for e in entries)
                continue

            present: set[str] = set()
            for entry in hooks[event]:
                present |= entry_commands(entry)

            for entry in entries:
                commands = entry_commands(entry)
                if commands and commands & present:
                    continue
                hooks[event].append(copy.deepcopy(entry))
                present |= commands
                if result is not None:
                    result.hooks_added.append(_describe(event, entry))

    return merged


def _load(path: Path, label: str) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise MergeConflict(f"Invalid JSON in {label} {path}: {e}", file_path=path) from e
    except OSError as e:
        raise MergeConflict(f"Could not read {label} {path}: {e}", file_path=path) from e
    try:
        return validate_document(data, f"{label} {path}")
    except MergeConflict as e:
        e.file_path = path
        raise


def _write(path: Path, document: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)
        f.write("\n")


def merge_settings_file(source_file: Path, target_file: Path) -> SettingsMergeResult | None:
    """
    Merge the framework settings file into a project settings file on disk.

    A missing project file is created as a copy of the framework file. The
    project file is rewritten only if the merge changed it.

    Returns:
        SettingsMergeResult, or None when the framework has no settings file

    Raises:
        MergeConflict: If either file is unreadable or malformed; the project
            file is left untouched
    """
    if not source_file.is_file():
        logger.debug("No framework settings at %s, skipping merge", source_file)
        return None

    incoming = _load(source_file, "framework settings")
    result = SettingsMergeResult(file_path=str(target_file))

    if not target_file.exists():
        _write(target_file, incoming)
        logger.info("Created %s from framework settings", target_file)
        result.created = True
        result.changed = True
        return result

    existing = _load(target_file, "project settings")
    merged = merge_documents(existing, incoming, result)

    if merged != existing:
        try:
            _write(target_file, merged)
        except OSError as e:
            raise MergeConflict(f"Failed to write {target_file}: {e}", file_path=target_file) from e
        result.changed = True
        logger.info("Merged framework settings into %s", target_file)
    else:
        logger.debug("Settings already up to date: %s", target_file)

    return result
