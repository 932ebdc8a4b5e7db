"""Skill installation for a freshly scaffolded project.

Drives the skills CLI once per registry source, sequentially:

    npx skills add <source> -a <agent> -s <skill> [-s <skill> ...] -y

A failing source is reported and the loop moves on to the next one; the
installation as a whole fails if any source failed.  After a fully
successful run the installed files are fingerprinted (see ``checksums``).
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from rich.markup import escape

from ..errors import AppError, SkillInstallError, error_message
from ..models import PlannedSource, ProjectConfig, SkillInstallPlan
from ..ports import (
    FileSystemPort,
    LoggerPort,
    ProgressCallback,
    ProgressStatusName,
    ShellPort,
    SpinnerPort,
    TemplateLoaderPort,
)
from ..result import OK_NONE, Err, Result
from ..utils import format_command, print_warning
from .checksums import ChecksumReport, verify_checksums
from .planner import build_install_plan, select_tags
from .registry import load_registry


class InstallerState(str, Enum):
    """Where the installer is in its run."""
    IDLE = "idle"
    REGISTRY_LOADED = "registry-loaded"
    PLAN_BUILT = "plan-built"
    INSTALLING = "installing"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"


class SkillInstaller:
    """Installs the skills a project configuration calls for.

    Args:
        shell: Shell runner used to invoke the skills CLI.
        fs: Filesystem port (checksum manifest).
        loader: Template loader used to read the packaged registry.
        logger: Logging sink.
        spinner: Spinner factory for per-source progress.
        skills_cli: Executable that provides the ``skills`` subcommand.
        timeout: Seconds allowed for one source's installation.
    """

    def __init__(
        self,
        shell: ShellPort,
        fs: FileSystemPort,
        loader: TemplateLoaderPort,
        logger: LoggerPort,
        spinner: SpinnerPort,
        skills_cli: str = "npx",
        timeout: float = 300.0,
    ) -> None:
        self.shell = shell
        self.fs = fs
        self.loader = loader
        self.logger = logger
        self.spinner = spinner
        self.skills_cli = skills_cli
        self.timeout = timeout
        self.state = InstallerState.IDLE
        self.plan: SkillInstallPlan | None = None
        self.checksum_report: ChecksumReport | None = None

    # -- Public API --------------------------------------------------------

    async def install(
        self,
        config: ProjectConfig,
        target_dir: str | Path,
        skills_dir: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Result[None, AppError]:
        """Install every planned source into *target_dir*.

        Returns ``Err(InternalError)`` for a broken registry and
        ``Err(SkillInstallError)`` when nothing was selected or any source
        failed.  Partially installed skills are left in place.
        """
        self.state = InstallerState.IDLE
        self.logger.info("Loading skill registry", {"target_dir": str(target_dir)})

        registry = await load_registry(self.loader)
        if registry.is_err():
            return self._fail(registry.error)
        self.state = InstallerState.REGISTRY_LOADED

        selected_tags = select_tags(config)
        self.logger.info("Selected skill tags", {"tags": sorted(selected_tags)})

        plan = build_install_plan(registry.value.start_skills, selected_tags, self.logger)
        self.plan = plan
        if plan.is_empty:
            return self._fail(
                SkillInstallError(
                    "No skills selected for installation from start_skills registry",
                    "unknown",
                    {"tags": sorted(selected_tags)},
                )
            )
        self.state = InstallerState.PLAN_BUILT

        failed_sources: list[str] = []
        for source in plan.sources:
            self.state = InstallerState.INSTALLING
            if not await self._install_source(source, config.ai_tool, target_dir, on_progress):
                failed_sources.append(source.label)

        if failed_sources:
            return self._fail(
                SkillInstallError(
                    f"Failed to install skills from sources: {', '.join(failed_sources)}",
                    "multiple-sources" if len(failed_sources) > 1 else failed_sources[0],
                    {"failed_sources": failed_sources},
                )
            )

        self.state = InstallerState.VERIFYING
        self.checksum_report = await verify_checksums(
            self.fs, self.logger, Path(target_dir) / skills_dir
        )
        self.state = InstallerState.DONE
        return OK_NONE

    def command_for(self, source: PlannedSource, agent: str) -> tuple[str, list[str]]:
        """Command and argument vector installing *source* for *agent*."""
        args = ["skills", "add", source.id, "-a", agent]
        for skill in source.skills:
            args.extend(["-s", skill])
        args.append("-y")
        return self.skills_cli, args

    # -- Internals ---------------------------------------------------------

    async def _install_source(
        self,
        source: PlannedSource,
        agent: str,
        target_dir: str | Path,
        on_progress: Optional[ProgressCallback],
    ) -> bool:
        command, args = self.command_for(source, agent)
        message = f"Installing skills from {source.label}"
        _notify(on_progress, message, "start")
        handle = self.spinner.start(message)
        self.logger.info(
            "Installing skills",
            {"source": source.label, "command": format_command(command, args)},
        )

        result = await self.shell.run(command, args, target_dir, timeout=self.timeout)

        if result.is_ok():
            handle.stop(f"[green]✓[/green] {message}")
            self.logger.info("Skills installed successfully", {"source": source.label})
            _notify(on_progress, f"Installed skills from {source.label}", "success")
            return True

        handle.stop(f"[red]✖[/red] {message}")
        self.logger.error(
            "Failed to install skills",
            {"source": source.label, "error": error_message(result.error)},
        )
        _notify(on_progress, f"Could not install skills from {source.label}", "error")

        print_warning(f"Could not install {escape(source.label)}.")
        stderr = getattr(result.error, "stderr", "") or ""
        if stderr.strip():
            print_warning(escape(stderr.strip()))
        print_warning(f"Run manually: {escape(format_command(command, args))}")
        return False

    def _fail(self, error: AppError) -> Err:
        self.state = InstallerState.FAILED
        self.logger.error("Skill installation failed", {"error": error.message, "code": error.code})
        return Err(error)


def _notify(callback: Optional[ProgressCallback], message: str, status: ProgressStatusName) -> None:
    if callback is not None:
        callback(message, status)


__all__ = ["InstallerState", "ProgressCallback", "SkillInstaller"]
