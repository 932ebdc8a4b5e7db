"""Shared pytest fixtures for the start-vibe-project test suite.

Provides reusable fixtures for:
- Project configurations (the default is a React + Express web app)
- Mocked logger and spinner ports
- A real filesystem port and template loader over the packaged resources
- A fake shell runner that records calls and can materialise skill files
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from start_vibe_project.errors import CommandExecutionError
from start_vibe_project.infra import LocalFileSystem, TemplateLoader
from start_vibe_project.infra.shell import CommandOutput
from start_vibe_project.models import ProjectConfig
from start_vibe_project.result import Err, Ok


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_CONFIG: dict[str, Any] = {
    "name": "demo",
    "template": "web-app",
    "description": "",
    "components": {"frontend": True, "backend": True, "database": False, "auth": False},
    "frontend_stack": "react-vite",
    "backend_stack": "express",
    "ai_tool": "claude-code",
    "use_simple_mem": False,
    "use_relief_pilot": False,
}


@pytest.fixture
def make_config() -> Callable[..., ProjectConfig]:
    """Factory for validated ``ProjectConfig`` objects with overrides."""

    def _make(**overrides: Any) -> ProjectConfig:
        return ProjectConfig(**{**DEFAULT_CONFIG, **overrides})

    return _make


@pytest.fixture
def project_config(make_config) -> ProjectConfig:
    return make_config()


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger port whose calls can be asserted on."""
    logger = MagicMock()
    logger.messages = lambda level: [c.args[0] for c in getattr(logger, level).call_args_list]
    return logger


@pytest.fixture
def mock_spinner() -> MagicMock:
    spinner = MagicMock()
    spinner.start.return_value = MagicMock()
    return spinner


@pytest.fixture
def local_fs() -> LocalFileSystem:
    return LocalFileSystem()


@pytest.fixture
def package_loader(local_fs: LocalFileSystem) -> TemplateLoader:
    """Template loader reading the real packaged templates and assets."""
    return TemplateLoader(local_fs)


class FakeShell:
    """Shell runner double.

    Records every call as ``(command, args, cwd, timeout)``.  Commands listed
    in ``failures`` return a ``CommandExecutionError``; a successful
    ``skills add`` writes one ``SKILL.md`` per ``-s`` flag under
    ``skills_dir`` when it is set.
    """

    def __init__(self, skills_dir: str | None = None) -> None:
        self.calls: list[tuple[str, list[str], Path, Any]] = []
        self.failures: dict[str, str] = {}
        self.skills_dir = skills_dir

    def fail(self, needle: str, stderr: str = "boom") -> None:
        self.failures[needle] = stderr

    def commands(self) -> list[str]:
        return [" ".join([command, *args]) for command, args, _, _ in self.calls]

    async def run(self, command, args, cwd, *, timeout=None, cancel_event=None):
        self.calls.append((command, list(args), Path(cwd), timeout))
        rendered = " ".join([command, *args])
        for needle, stderr in self.failures.items():
            if needle in rendered:
                return Err(
                    CommandExecutionError(
                        "Command failed with exit code 1", rendered, 1, stderr
                    )
                )

        if self.skills_dir and args[:2] == ["skills", "add"]:
            skills = [args[i + 1] for i, arg in enumerate(args) if arg == "-s"]
            for skill in skills:
                skill_dir = Path(cwd) / self.skills_dir / skill
                skill_dir.mkdir(parents=True, exist_ok=True)
                (skill_dir / "SKILL.md").write_text(f"# {skill}\n", encoding="utf-8")

        return Ok(CommandOutput(stdout="", stderr=""))


@pytest.fixture
def fake_shell() -> FakeShell:
    return FakeShell()


@pytest.fixture
def make_shell() -> Callable[..., FakeShell]:
    """Factory for ``FakeShell`` instances that materialise skills."""
    return FakeShell
