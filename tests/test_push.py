"""
Tests for the push coordinator.

Tests cover:
- Updating a target: submodule revision, managed files, commit
- Idempotence (second push is a no-op)
- Partial failure isolation and registry ordering
- Project-owned files are never touched
- Settings merge during push, including conflicts
- Completing a target that failed part-way on the next push
- Timeouts, unavailable revisions, publishing
"""

import json
import shutil
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from fleetsync.core.config import FleetConfig
from fleetsync.core.exceptions import FleetSyncError, TargetTimeout
from fleetsync.core.git import Git
from fleetsync.core.registry import Registry
from fleetsync.core.sync import PushCoordinator, PushStatus, TargetOutcome

MARKER = ".claude-framework"


def recorded_pointer(run_git: Callable[..., str], project: Path) -> str:
    """Submodule commit recorded in the project's HEAD."""
    return run_git(project, "ls-tree", "HEAD", MARKER).split()[2]


@pytest.fixture
def coordinator(config: FleetConfig, registry: Registry) -> PushCoordinator:
    return PushCoordinator(config, registry)


@pytest.fixture
def target(make_target: Callable[[str], Path], registry: Registry) -> Path:
    project = make_target("app")
    registry.register(project)
    return project


class TestPushUpdatesTarget:
    """Tests for a normal push to one behind target."""

    def test_submodule_moved_and_committed(
        self,
        coordinator: PushCoordinator,
        target: Path,
        framework: Path,
        advance_framework: Callable[..., str],
        run_git: Callable[..., str],
    ) -> None:
        sha = advance_framework()
        short = run_git(framework, "rev-parse", "--short", sha)

        report = coordinator.push()

        [outcome] = report.outcomes
        assert outcome.status == PushStatus.UPDATED
        assert outcome.to_revision == short
        assert outcome.commit_sha is not None
        assert run_git(target / MARKER, "rev-parse", "HEAD") == sha
        assert run_git(target, "log", "-1", "--format=%s") == (
            f"chore: update claude framework to {short}"
        )
        assert run_git(target, "status", "--porcelain") == ""

    def test_managed_files_copied(
        self,
        coordinator: PushCoordinator,
        target: Path,
        framework: Path,
        advance_framework: Callable[..., str],
    ) -> None:
        advance_framework()

        [outcome] = coordinator.push().outcomes

        assert sorted(outcome.files_copied) == [
            ".claude/agents/planner.md",
            ".claude/agents/reviewer.md",
            ".claude/commands/review.md",
            ".claude/hooks/format.sh",
            "docs/CODE-STANDARDS.md",
            "scripts/ralph.sh",
        ]
        for relative in outcome.files_copied:
            assert (target / relative).read_bytes() == (framework / relative).read_bytes()
        assert not (target / "scripts" / "sync.sh").exists()

    def test_project_files_untouched(
        self,
        coordinator: PushCoordinator,
        target: Path,
        advance_framework: Callable[..., str],
    ) -> None:
        claude_md = (target / "CLAUDE.md").read_text()
        advance_framework({"CLAUDE.md": "# Framework template changed\n"})

        coordinator.push()

        assert (target / "CLAUDE.md").read_text() == claude_md
        assert not (target / "PROGRESS.md").exists()

    def test_local_edit_to_managed_file_overwritten(
        self,
        coordinator: PushCoordinator,
        target: Path,
        framework: Path,
        advance_framework: Callable[..., str],
    ) -> None:
        advance_framework()
        coordinator.push()
        (target / ".claude/agents/reviewer.md").write_text("# Local tweak\n")
        advance_framework({".claude/agents/planner.md": "# Planner v2\n"})

        [outcome] = coordinator.push().outcomes

        assert set(outcome.files_copied) == {
            ".claude/agents/planner.md",
            ".claude/agents/reviewer.md",
        }
        assert (target / ".claude/agents/reviewer.md").read_text() == (
            framework / ".claude/agents/reviewer.md"
        ).read_text()

    def test_target_only_files_kept(
        self,
        coordinator: PushCoordinator,
        target: Path,
        advance_framework: Callable[..., str],
    ) -> None:
        local_agent = target / ".claude" / "agents" / "local.md"
        local_agent.parent.mkdir(parents=True)
        local_agent.write_text("# Local agent\n")
        advance_framework()

        coordinator.push()

        assert local_agent.read_text() == "# Local agent\n"


class TestPushIdempotence:
    """Tests for repeated pushes."""

    def test_second_push_is_up_to_date(
        self,
        coordinator: PushCoordinator,
        target: Path,
        advance_framework: Callable[..., str],
        run_git: Callable[..., str],
    ) -> None:
        advance_framework()
        coordinator.push()
        commits = run_git(target, "rev-list", "--count", "HEAD")

        report = coordinator.push()

        assert [o.status for o in report.outcomes] == [PushStatus.UP_TO_DATE]
        assert run_git(target, "rev-list", "--count", "HEAD") == commits

    def test_target_already_current(self, coordinator: PushCoordinator, target: Path) -> None:
        report = coordinator.push()

        assert report.up_to_date[0].path == target.resolve()
        assert report.summary() == "Updated: 0 | Already current: 1 | Failed: 0"


class TestPushFailures:
    """Tests for per-target failure isolation."""

    def test_middle_target_failure_does_not_stop_others(
        self,
        coordinator: PushCoordinator,
        make_target: Callable[[str], Path],
        registry: Registry,
        advance_framework: Callable[..., str],
    ) -> None:
        projects = [make_target(name) for name in ("alpha", "beta", "gamma")]
        for project in projects:
            registry.register(project)
        shutil.rmtree(projects[1] / MARKER)
        (projects[1] / MARKER).mkdir()
        advance_framework()

        report = coordinator.push()

        assert [o.name for o in report.outcomes] == ["alpha", "beta", "gamma"]
        assert [o.status for o in report.outcomes] == [
            PushStatus.UPDATED,
            PushStatus.FAILED,
            PushStatus.UPDATED,
        ]
        assert report.failed == [(projects[1].resolve(), "submodule not initialized")]
        assert report.summary() == "Updated: 2 | Already current: 0 | Failed: 1"

    def test_missing_project_directory(
        self,
        coordinator: PushCoordinator,
        target: Path,
    ) -> None:
        shutil.rmtree(target)

        [outcome] = coordinator.push().outcomes

        assert outcome.status == PushStatus.FAILED
        assert outcome.reason == "project directory not found"

    def test_missing_submodule(self, coordinator: PushCoordinator, target: Path) -> None:
        shutil.rmtree(target / MARKER)

        [outcome] = coordinator.push().outcomes

        assert outcome.reason == "submodule not found"

    def test_revision_not_fetchable(
        self,
        coordinator: PushCoordinator,
        target: Path,
        tmp_path: Path,
        framework: Path,
        advance_framework: Callable[..., str],
        run_git: Callable[..., str],
    ) -> None:
        stale_mirror = tmp_path / "stale-mirror"
        run_git(tmp_path, "clone", "--quiet", "--bare", str(framework), str(stale_mirror))
        run_git(target / MARKER, "remote", "set-url", "origin", str(stale_mirror))
        advance_framework()

        [outcome] = coordinator.push().outcomes

        assert outcome.status == PushStatus.FAILED
        assert "not available from origin" in outcome.reason
        assert "publish the framework first" in outcome.reason

    def test_fetch_error_reports_stderr(
        self,
        coordinator: PushCoordinator,
        target: Path,
        tmp_path: Path,
        advance_framework: Callable[..., str],
        run_git: Callable[..., str],
    ) -> None:
        run_git(target / MARKER, "remote", "set-url", "origin", str(tmp_path / "gone"))
        advance_framework()

        [outcome] = coordinator.push().outcomes

        assert outcome.status == PushStatus.FAILED
        assert outcome.reason

    def test_timeout_marks_target_failed(
        self,
        coordinator: PushCoordinator,
        target: Path,
        advance_framework: Callable[..., str],
    ) -> None:
        advance_framework()

        with patch.object(Git, "fetch", side_effect=TargetTimeout("Timed out after 120s")):
            [outcome] = coordinator.push().outcomes

        assert outcome.status == PushStatus.FAILED
        assert outcome.reason == "timed out after 120s"

    def test_unreadable_framework_raises(self, registry: Registry, tmp_path: Path) -> None:
        config = FleetConfig(framework_dir=tmp_path / "nope", registry_file=registry.file_path)

        with pytest.raises(FleetSyncError):
            PushCoordinator(config, registry).push()


class TestPushSettings:
    """Tests for settings merge during push."""

    def test_settings_created_when_missing(
        self,
        coordinator: PushCoordinator,
        target: Path,
        framework: Path,
        advance_framework: Callable[..., str],
    ) -> None:
        advance_framework()

        [outcome] = coordinator.push().outcomes

        assert outcome.settings is not None and outcome.settings.created
        assert json.loads((target / ".claude/settings.json").read_text()) == json.loads(
            (framework / ".claude/settings.json").read_text()
        )

    def test_project_customisations_preserved(
        self,
        coordinator: PushCoordinator,
        target: Path,
        advance_framework: Callable[..., str],
        run_git: Callable[..., str],
    ) -> None:
        settings = target / ".claude" / "settings.json"
        settings.parent.mkdir(parents=True)
        settings.write_text(
            json.dumps(
                {
                    "env": {"PROJECT_FLAG": "1", "CLAUDE_CODE_MAX_OUTPUT_TOKENS": "8000"},
                    "hooks": {"Stop": [{"type": "command", "command": "bash custom.sh"}]},
                    "model": "opus",
                }
            )
        )
        advance_framework()

        [outcome] = coordinator.push().outcomes
        merged = json.loads(settings.read_text())

        assert outcome.settings is not None and outcome.settings.changed
        assert merged["model"] == "opus"
        assert merged["env"] == {
            "PROJECT_FLAG": "1",
            "CLAUDE_CODE_MAX_OUTPUT_TOKENS": "32000",
        }
        assert [h["command"] for h in merged["hooks"]["Stop"]] == [
            "bash custom.sh",
            "bash .claude/hooks/progress.sh",
        ]
        assert "PostToolUse" in merged["hooks"]
        assert run_git(target, "status", "--porcelain") == ""

    def test_malformed_settings_is_conflict(
        self,
        coordinator: PushCoordinator,
        target: Path,
        advance_framework: Callable[..., str],
        run_git: Callable[..., str],
    ) -> None:
        settings = target / ".claude" / "settings.json"
        settings.parent.mkdir(parents=True)
        settings.write_text("{ broken")
        sha = advance_framework()

        report = coordinator.push()
        [outcome] = report.outcomes

        assert outcome.status == PushStatus.UPDATED
        assert report.has_conflicts
        assert len(outcome.conflicts) == 1
        assert settings.read_text() == "{ broken"
        assert (target / ".claude/agents/reviewer.md").exists()
        assert run_git(target / MARKER, "rev-parse", "HEAD") == sha
        assert recorded_pointer(run_git, target) != sha
        assert run_git(target, "ls-files", ".claude/agents/reviewer.md")


class TestPushRetry:
    """A target that failed part-way is completed by the next push."""

    def test_failed_copy_repaired_by_next_push(
        self,
        coordinator: PushCoordinator,
        target: Path,
        framework: Path,
        advance_framework: Callable[..., str],
        run_git: Callable[..., str],
    ) -> None:
        blocker = target / ".claude" / "agents"
        blocker.parent.mkdir(parents=True)
        blocker.write_text("not a directory")
        sha = advance_framework()

        [first] = coordinator.push().outcomes
        blocker.unlink()
        [second] = coordinator.push().outcomes

        assert first.status == PushStatus.FAILED
        assert second.status == PushStatus.UPDATED
        assert ".claude/agents/reviewer.md" in second.files_copied
        assert (target / ".claude/agents/reviewer.md").read_text() == (
            framework / ".claude/agents/reviewer.md"
        ).read_text()
        assert recorded_pointer(run_git, target) == sha
        assert [o.status for o in coordinator.push().outcomes] == [PushStatus.UP_TO_DATE]

    def test_checked_out_but_uncommitted_submodule_is_updated(
        self,
        coordinator: PushCoordinator,
        target: Path,
        advance_framework: Callable[..., str],
        run_git: Callable[..., str],
    ) -> None:
        sha = advance_framework()
        run_git(target / MARKER, "fetch", "--quiet", "origin")
        run_git(target / MARKER, "checkout", "--quiet", "--detach", sha)

        [outcome] = coordinator.push().outcomes

        assert outcome.status == PushStatus.UPDATED
        assert outcome.commit_sha is not None
        assert (target / ".claude/agents/reviewer.md").exists()
        assert recorded_pointer(run_git, target) == sha

    def test_settings_conflict_retried_after_fix(
        self,
        coordinator: PushCoordinator,
        target: Path,
        advance_framework: Callable[..., str],
        run_git: Callable[..., str],
    ) -> None:
        settings = target / ".claude" / "settings.json"
        settings.parent.mkdir(parents=True)
        settings.write_text("{ broken")
        sha = advance_framework()
        coordinator.push()

        settings.write_text(json.dumps({"env": {"PROJECT_FLAG": "1"}}))
        [outcome] = coordinator.push().outcomes

        assert outcome.status == PushStatus.UPDATED
        assert outcome.conflicts == []
        assert json.loads(settings.read_text())["env"] == {
            "PROJECT_FLAG": "1",
            "CLAUDE_CODE_MAX_OUTPUT_TOKENS": "32000",
        }
        assert recorded_pointer(run_git, target) == sha
        assert [o.status for o in coordinator.push().outcomes] == [PushStatus.UP_TO_DATE]


class TestPublish:
    """Tests for publishing the framework before pushing."""

    def test_publish_failure_is_reported(
        self,
        coordinator: PushCoordinator,
        target: Path,
        advance_framework: Callable[..., str],
    ) -> None:
        advance_framework()

        report = coordinator.push(publish=True)

        assert report.publish_error
        assert [o.status for o in report.outcomes] == [PushStatus.UPDATED]

    def test_publish_pushes_framework_branch(
        self,
        config: FleetConfig,
        registry: Registry,
        tmp_path: Path,
        framework: Path,
        advance_framework: Callable[..., str],
        run_git: Callable[..., str],
    ) -> None:
        remote = tmp_path / "remote.git"
        run_git(tmp_path, "init", "--quiet", "--bare", str(remote))
        run_git(framework, "remote", "add", "origin", str(remote))
        branch = run_git(framework, "rev-parse", "--abbrev-ref", "HEAD")
        sha = advance_framework()
        config = config.model_copy(update={"branch": branch})

        report = PushCoordinator(config, registry).push(publish=True)

        assert report.publish_error is None
        assert run_git(remote, "rev-parse", branch) == sha


class TestProgress:
    """Tests for the per-target callback."""

    def test_on_outcome_called_in_order(
        self,
        coordinator: PushCoordinator,
        make_target: Callable[[str], Path],
        registry: Registry,
    ) -> None:
        for name in ("one", "two"):
            registry.register(make_target(name))
        seen: list[TargetOutcome] = []

        report = coordinator.push(on_outcome=seen.append)

        assert [o.name for o in seen] == ["one", "two"]
        assert report.completed_at is not None
        assert report.duration_seconds is not None

    def test_empty_registry(self, coordinator: PushCoordinator) -> None:
        report = coordinator.push()

        assert report.outcomes == []
        assert report.summary() == "Updated: 0 | Already current: 0 | Failed: 0"
