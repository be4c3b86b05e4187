"""
Pytest configuration and shared fixtures.

Provides a framework git repository with managed files, a factory for
linked target projects (each with a clone of the framework as its
submodule directory), and a config/registry pair pointing at temp paths.
"""

import json
import os
import subprocess
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from fleetsync.core.config import FleetConfig
from fleetsync.core.registry import Registry

MARKER = ".claude-framework"

FRAMEWORK_SETTINGS = {
    "env": {"CLAUDE_CODE_MAX_OUTPUT_TOKENS": "32000"},
    "hooks": {
        "PostToolUse": [
            {
                "matcher": "Edit|Write",
                "hooks": [{"type": "command", "command": "bash .claude/hooks/format.sh"}],
            }
        ],
        "Stop": [{"type": "command", "command": "bash .claude/hooks/progress.sh"}],
    },
}


# ==============================================================================
# Git helpers
# ==============================================================================


def git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def init_repo(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "--quiet")
    git(path, "config", "user.email", "test@example.com")
    git(path, "config", "user.name", "Test User")
    git(path, "config", "commit.gpgsign", "false")
    return path


def commit_all(repo: Path, message: str) -> str:
    git(repo, "add", "-A")
    git(repo, "commit", "--quiet", "-m", message)
    return git(repo, "rev-parse", "HEAD")


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


# ==============================================================================
# Repository fixtures
# ==============================================================================


@pytest.fixture
def framework(tmp_path: Path) -> Path:
    """
    Provide a framework repository with one commit.

    Creates:
    - .claude/agents/{planner,reviewer}.md
    - .claude/commands/review.md
    - .claude/hooks/format.sh
    - .claude/settings.json
    - scripts/{ralph,sync}.sh
    - docs/CODE-STANDARDS.md
    - CLAUDE.md, PROGRESS.md
    """
    repo = init_repo(tmp_path / "framework")

    write(repo / ".claude" / "agents" / "planner.md", "# Planner\nPlan the work.\n")
    write(repo / ".claude" / "agents" / "reviewer.md", "# Reviewer\nReview the work.\n")
    write(repo / ".claude" / "commands" / "review.md", "Run the reviewer agent.\n")
    write(repo / ".claude" / "hooks" / "format.sh", "#!/bin/bash\necho format\n").chmod(0o755)
    write(repo / ".claude" / "settings.json", json.dumps(FRAMEWORK_SETTINGS, indent=2) + "\n")
    write(repo / "scripts" / "ralph.sh", "#!/bin/bash\necho ralph\n").chmod(0o755)
    write(repo / "scripts" / "sync.sh", "#!/bin/bash\necho sync\n").chmod(0o755)
    write(repo / "docs" / "CODE-STANDARDS.md", "# Code standards\n")
    write(repo / "CLAUDE.md", "# Framework CLAUDE.md\n[REPLACE: project]\n")
    write(repo / "PROGRESS.md", "# Progress\n")

    commit_all(repo, "Initial framework")
    return repo


@pytest.fixture
def make_target(tmp_path: Path, framework: Path) -> Callable[[str], Path]:
    """
    Factory for target projects linked to the framework.

    Each target is a git repository with its own CLAUDE.md and a clone of
    the framework at ``.claude-framework`` (origin = the framework repo),
    committed as the project's submodule pointer.
    """

    def _make(name: str) -> Path:
        project = init_repo(tmp_path / "projects" / name)
        write(project / "README.md", f"# {name}\n")
        write(project / "CLAUDE.md", f"# {name} CLAUDE.md\nProject specific notes.\n")
        commit_all(project, "Initial project")
        git(project, "clone", "--quiet", str(framework), MARKER)
        git(project, "add", MARKER)
        git(project, "commit", "--quiet", "-m", "Link framework")
        return project

    return _make


@pytest.fixture
def advance_framework(framework: Path) -> Callable[..., str]:
    """Factory that commits a change to the framework and returns the new SHA."""
    counter = {"n": 0}

    def _advance(files: dict[str, str] | None = None, message: str | None = None) -> str:
        counter["n"] += 1
        if files is None:
            files = {".claude/agents/reviewer.md": f"# Reviewer\nRevision {counter['n']}.\n"}
        for relative, content in files.items():
            write(framework / relative, content)
        return commit_all(framework, message or f"Framework change {counter['n']}")

    return _advance


# ==============================================================================
# Config fixtures
# ==============================================================================


@pytest.fixture
def registry_file(tmp_path: Path) -> Path:
    return tmp_path / "home" / ".fleetsync" / "projects.txt"


@pytest.fixture
def config(framework: Path, registry_file: Path) -> FleetConfig:
    """Provide a FleetConfig pointing at the temp framework and registry."""
    return FleetConfig(framework_dir=framework, registry_file=registry_file, target_timeout=120)


@pytest.fixture
def registry(config: FleetConfig) -> Registry:
    return Registry(config.registry_file, marker_dir=config.marker_dir)


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep tests away from the real ~/.config/fleetsync and FLEETSYNC_* variables."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "FLEETSYNC_FRAMEWORK_DIR",
        "FLEETSYNC_REGISTRY",
        "FLEETSYNC_MARKER",
        "FLEETSYNC_GIT_TIMEOUT",
        "FLEETSYNC_TARGET_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    for name in [key for key in os.environ if key.startswith("FLEETSYNC_")]:
        del os.environ[name]


@pytest.fixture
def run_git() -> Callable[..., str]:
    """Expose the git helper to tests."""
    return git
