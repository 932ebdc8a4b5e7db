"""Unit tests for the skill installer (start_vibe_project.skills.installer).

Tests cover:
- One skills CLI invocation per planned source, in registry order
- Best-effort loop: every source is attempted, failures are aggregated
- Empty plans and broken registries
- Progress callbacks and checksum verification after success
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from start_vibe_project.errors import InternalError, SkillInstallError, TemplateLoadError
from start_vibe_project.models import PlannedSource
from start_vibe_project.result import Err, Ok
from start_vibe_project.skills import InstallerState, SkillInstaller

pytestmark = pytest.mark.unit

DESIGN_SOURCE = "ancoleman/ai-design-components/skills"
CODE_SOURCE = "itechmeat/llm-code"


@pytest.fixture
def make_installer(local_fs, package_loader, mock_logger, mock_spinner):
    def _make(shell, loader=None, **kwargs) -> SkillInstaller:
        return SkillInstaller(
            shell, local_fs, loader or package_loader, mock_logger, mock_spinner, **kwargs
        )

    return _make


class TestCommandFor:
    def test_argument_vector(self, make_installer, fake_shell):
        installer = make_installer(fake_shell)
        source = PlannedSource(id="org/repo", label="Repo", skills=["a", "b"])
        assert installer.command_for(source, "cursor") == (
            "npx",
            ["skills", "add", "org/repo", "-a", "cursor", "-s", "a", "-s", "b", "-y"],
        )

    def test_custom_cli(self, make_installer, fake_shell):
        installer = make_installer(fake_shell, skills_cli="bunx")
        source = PlannedSource(id="org/repo", label="Repo", skills=["a"])
        assert installer.command_for(source, "codex")[0] == "bunx"


class TestInstall:
    @pytest.mark.asyncio
    async def test_installs_each_source(
        self, make_shell, make_installer, project_config, tmp_path
    ):
        shell = make_shell(skills_dir=".claude/skills")
        installer = make_installer(shell, timeout=42.0)

        result = await installer.install(project_config, tmp_path, ".claude/skills")

        assert result.is_ok()
        assert [args[2] for _, args, _, _ in shell.calls] == [CODE_SOURCE, DESIGN_SOURCE]
        assert all(cwd == tmp_path and timeout == 42.0 for _, _, cwd, timeout in shell.calls)
        assert installer.state is InstallerState.DONE
        assert installer.checksum_report.manifest_created is True
        assert (tmp_path / ".claude" / "skills" / ".checksums.json").exists()

    @pytest.mark.asyncio
    async def test_agent_passed_to_cli(self, make_shell, make_installer, make_config, tmp_path):
        shell = make_shell()
        config = make_config(ai_tool="windsurf")
        await make_installer(shell).install(config, tmp_path, ".windsurf/skills")
        assert all(args[3:5] == ["-a", "windsurf"] for _, args, _, _ in shell.calls)

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_loop(
        self, make_shell, make_installer, project_config, tmp_path
    ):
        shell = make_shell()
        shell.fail(CODE_SOURCE, stderr="network down")
        installer = make_installer(shell)

        with patch("start_vibe_project.skills.installer.print_warning") as warn:
            result = await installer.install(project_config, tmp_path, ".claude/skills")

        assert len(shell.calls) == 2
        assert result.is_err()
        assert isinstance(result.error, SkillInstallError)
        assert result.error.message == f"Failed to install skills from sources: {CODE_SOURCE}"
        assert result.error.skill_name == CODE_SOURCE
        assert installer.state is InstallerState.FAILED

        printed = [c.args[0] for c in warn.call_args_list]
        assert printed[0] == f"Could not install {CODE_SOURCE}."
        assert printed[1] == "network down"
        assert printed[2].startswith(f"Run manually: npx skills add {CODE_SOURCE} -a claude-code")

    @pytest.mark.asyncio
    async def test_all_failures_aggregated(
        self, make_shell, make_installer, project_config, tmp_path
    ):
        shell = make_shell()
        shell.fail("skills add")

        with patch("start_vibe_project.skills.installer.print_warning"):
            result = await make_installer(shell).install(
                project_config, tmp_path, ".claude/skills"
            )

        assert result.error.message == (
            f"Failed to install skills from sources: {CODE_SOURCE}, {DESIGN_SOURCE}"
        )
        assert result.error.skill_name == "multiple-sources"

    @pytest.mark.asyncio
    async def test_no_checksums_after_failure(
        self, make_shell, make_installer, project_config, tmp_path
    ):
        shell = make_shell(skills_dir=".claude/skills")
        shell.fail(DESIGN_SOURCE)
        installer = make_installer(shell)

        with patch("start_vibe_project.skills.installer.print_warning"):
            await installer.install(project_config, tmp_path, ".claude/skills")

        assert installer.checksum_report is None
        assert not (tmp_path / ".claude" / "skills" / ".checksums.json").exists()

    @pytest.mark.asyncio
    async def test_empty_plan(self, make_shell, make_installer, make_config, tmp_path):
        loader = MagicMock()
        registry = {
            "start_skills": [
                {"id": "o/r", "label": "x", "skills": [{"name": "a", "tags": ["vue"]}]}
            ]
        }
        loader.load_data = AsyncMock(return_value=Ok(json.dumps(registry)))
        shell = make_shell()
        installer = make_installer(shell, loader=loader)

        result = await installer.install(make_config(), tmp_path, ".claude/skills")

        assert result.is_err()
        assert result.error.message == (
            "No skills selected for installation from start_skills registry"
        )
        assert result.error.skill_name == "unknown"
        assert shell.calls == []

    @pytest.mark.asyncio
    async def test_broken_registry(
        self, make_shell, make_installer, project_config, tmp_path
    ):
        loader = MagicMock()
        loader.load_data = AsyncMock(
            return_value=Err(TemplateLoadError("Failed to load data", "skill-registry.json"))
        )
        shell = make_shell()

        result = await make_installer(shell, loader=loader).install(
            project_config, tmp_path, ".claude/skills"
        )

        assert isinstance(result.error, InternalError)
        assert shell.calls == []

    @pytest.mark.asyncio
    async def test_progress_callback(
        self, make_shell, make_installer, project_config, tmp_path
    ):
        shell = make_shell()
        shell.fail(DESIGN_SOURCE)
        events: list[tuple[str, str]] = []

        with patch("start_vibe_project.skills.installer.print_warning"):
            await make_installer(shell).install(
                project_config,
                tmp_path,
                ".claude/skills",
                on_progress=lambda message, status: events.append((message, status)),
            )

        assert events == [
            (f"Installing skills from {CODE_SOURCE}", "start"),
            (f"Installed skills from {CODE_SOURCE}", "success"),
            (f"Installing skills from {DESIGN_SOURCE}", "start"),
            (f"Could not install skills from {DESIGN_SOURCE}", "error"),
        ]

    @pytest.mark.asyncio
    async def test_spinner_per_source(
        self, make_shell, make_installer, project_config, tmp_path, mock_spinner
    ):
        await make_installer(make_shell()).install(project_config, tmp_path, ".claude/skills")
        assert [c.args[0] for c in mock_spinner.start.call_args_list] == [
            f"Installing skills from {CODE_SOURCE}",
            f"Installing skills from {DESIGN_SOURCE}",
        ]
