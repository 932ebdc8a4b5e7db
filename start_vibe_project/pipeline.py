"""start-vibe-project creation pipeline.

Materialises a new project in ordered steps:

1. Directories     -- project root, ``.project/stories``, agent skills/agents dirs.
2. Documents       -- ``.project/*.md``, ``INIT.md``, ``AGENTS.md``, creator agent,
                      ``.editorconfig``, Copilot instructions, ``.gitignore``.
3. Skills          -- ``npx skills add`` per registry source, checksum manifest.
4. Finalize        -- companion tool install, ``git init``, initial commit.

Steps 1-3 stop the run at the first failure; finalize steps only warn.
Nothing already written is rolled back.

Usage::

    creator = ProjectCreator(fs, loader, shell, logger, tracker, installer, spinner)
    result = await creator.create(CreateProjectInput(...))
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Awaitable, Callable

from .agents import DOTTED_INSTRUCTIONS_AGENT
from .errors import AppError, InternalError, TemplateLoadError, error_message
from .infra.fs import assert_within
from .models import CreateProjectInput, ProjectConfig
from .ports import (
    FileSystemPort,
    LoggerPort,
    ProgressTrackerPort,
    ShellPort,
    SkillInstallerPort,
    SpinnerPort,
    TemplateLoaderPort,
)
from .result import OK_NONE, Err, Ok, Result
from .scaffolder.content import (
    CREATOR_TEMPLATE,
    CREATOR_TOOLS_TEMPLATE,
    INIT_TEMPLATE,
    PROJECT_CONTEXT_MD,
    PROJECT_DOCUMENTS,
    STORIES_TEMPLATE,
    apply_creator_tools,
    build_creator_values,
    build_document_context,
    build_init_values,
    generate_gitignore,
    strip_relief_pilot_requirement,
    strip_simple_mem_section,
)
from .scaffolder.templates import TemplateRenderer
from .skills.registry import load_registry

PROJECT_META_DIR = ".project"
COMMIT_MESSAGE = "chore(init): scaffold project with start-vibe-project CLI"

DEFAULT_COMPANION_PACKAGE = "@fission-ai/openspec"
DEFAULT_COMPANION_TIMEOUT = 120.0


def _failed(operation: str, error: object) -> AppError:
    if isinstance(error, AppError):
        return error.wrap(operation)
    return InternalError(f"{operation} failed: {error_message(error)}", {"operation": operation})


# ---------------------------------------------------------------------------
# Project creator
# ---------------------------------------------------------------------------


class ProjectCreator:
    """Drives one project-creation run over injected ports.

    Args:
        fs: Filesystem port.
        template_loader: Loader for packaged templates and assets.
        shell: Shell runner for npm and git.
        logger: Logging sink.
        progress_tracker: Receives every step; observes, never gates.
        skill_installer: Installs the project's skills.
        spinner: Spinner factory for the finalize phase.
        renderer: Template renderer; a strict default is created if omitted.
        companion_package: npm package installed globally while finalizing.
        companion_timeout: Seconds allowed for the companion install.
    """

    def __init__(
        self,
        fs: FileSystemPort,
        template_loader: TemplateLoaderPort,
        shell: ShellPort,
        logger: LoggerPort,
        progress_tracker: ProgressTrackerPort,
        skill_installer: SkillInstallerPort,
        spinner: SpinnerPort,
        renderer: TemplateRenderer | None = None,
        companion_package: str = DEFAULT_COMPANION_PACKAGE,
        companion_timeout: float = DEFAULT_COMPANION_TIMEOUT,
    ) -> None:
        self.fs = fs
        self.template_loader = template_loader
        self.shell = shell
        self.logger = logger
        self.progress_tracker = progress_tracker
        self.skill_installer = skill_installer
        self.spinner = spinner
        self.renderer = renderer or TemplateRenderer()
        self.companion_package = companion_package
        self.companion_timeout = companion_timeout

    async def create(self, request: CreateProjectInput) -> Result[None, AppError]:
        """Run every step for *request*.

        Never raises: an unexpected exception from any collaborator becomes
        ``Err(InternalError)``, and every failure is recorded as the progress
        file's error state.
        """
        config = request.config
        try:
            self.logger.info("Starting project creation", {"project_name": config.name})
            result = await self._run(request)
        except Exception as exc:
            message = error_message(exc)
            self.logger.error("Project creation failed", {"error": message})
            await self.progress_tracker.mark_error(exc)
            return Err(InternalError(f"Failed to create project: {message}"))

        if result.is_err():
            self.logger.error("Project creation failed", {"error": result.error.message})
            await self.progress_tracker.mark_error(result.error)
            return result

        await self.progress_tracker.mark_completed()
        self.logger.info("Project creation completed", {"project_name": config.name})
        return OK_NONE

    # ------------------------------------------------------------------
    # Step sequence
    # ------------------------------------------------------------------

    async def _run(self, request: CreateProjectInput) -> Result[None, AppError]:
        for phase in (
            self._create_directories,
            self._write_project_files,
            self._install_skills,
        ):
            result = await phase(request)
            if result.is_err():
                return result

        await self._finalize(request.target_dir)
        return OK_NONE

    async def _create_directories(self, request: CreateProjectInput) -> Result[None, AppError]:
        target = request.target_dir

        await self.progress_tracker.record_step("create-project-dir")
        result = await self._mkdir(target, "Create project directory", recursive=False)
        if result.is_err():
            return result

        await self.progress_tracker.record_step("create-project-structure")
        result = await self._mkdir(
            target / PROJECT_META_DIR / "stories", "Create project structure"
        )
        if result.is_err():
            return result

        await self.progress_tracker.record_step("create-agent-dirs")
        for relative, operation in (
            (request.agent_skills_dir, "Create skills directory"),
            (request.agent_agents_dir, "Create agents directory"),
        ):
            agent_dir = target / relative
            guard = assert_within(target, agent_dir)
            if guard.is_err():
                return Err(_failed(operation, guard.error))
            result = await self._mkdir(agent_dir, operation)
            if result.is_err():
                return result

        return OK_NONE

    async def _write_project_files(self, request: CreateProjectInput) -> Result[None, AppError]:
        await self.progress_tracker.record_step("write-project-files")
        for step in (
            self._write_init,
            self._write_documents,
            self._write_agents_md,
            self._write_creator_agent,
            self._write_editorconfig,
            self._write_copilot_instructions,
            self._write_gitignore,
        ):
            result = await step(request)
            if result.is_err():
                return result
        return OK_NONE

    async def _install_skills(self, request: CreateProjectInput) -> Result[None, AppError]:
        await self.progress_tracker.record_step("install-skills")

        def on_progress(message: str, status: str) -> None:
            if status == "error":
                self.logger.error(message)
            else:
                self.logger.info(message)

        result = await self.skill_installer.install(
            request.config, request.target_dir, request.agent_skills_dir, on_progress
        )
        if result.is_err():
            return Err(_failed("Skill installation", result.error))

        await self.progress_tracker.record_step("install-skills-complete")
        return OK_NONE

    async def _finalize(self, target: Path) -> None:
        """Best-effort companion install and git setup; failures only warn.

        The spinner is stopped even when a step raises.
        """
        handle = self.spinner.start("Finalizing installation...")
        finished = False
        try:
            await self._install_companion(target)
            await self._init_git(target)
            finished = True
        finally:
            handle.stop("✓ Finalizing installation." if finished else None)

    async def _install_companion(self, target: Path) -> None:
        await self.progress_tracker.record_step("install-openspec")
        installed = await self.shell.run(
            "npm",
            ["install", "-g", f"{self.companion_package}@latest"],
            target,
            timeout=self.companion_timeout,
        )
        if installed.is_err():
            self.logger.warn(
                "Failed to install/update companion tool globally",
                {"package": self.companion_package, "error": installed.error.message},
            )

    async def _init_git(self, target: Path) -> None:
        await self.progress_tracker.record_step("git-init")
        initialised = await self.shell.run("git", ["init"], target)
        if initialised.is_err():
            # The user can run git init by hand.
            self.logger.warn(
                "Failed to initialize git repository", {"error": initialised.error.message}
            )
            return

        await self.progress_tracker.record_step("git-initial-commit")
        staged = await self.shell.run("git", ["add", "."], target)
        if staged.is_err():
            self.logger.warn("Failed to stage files for commit", {"error": staged.error.message})
            return

        committed = await self.shell.run("git", ["commit", "-m", COMMIT_MESSAGE], target)
        if committed.is_err():
            self.logger.warn(
                "Failed to create initial commit", {"error": committed.error.message}
            )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def _write_init(self, request: CreateProjectInput) -> Result[None, AppError]:
        template = await self._load(
            self.template_loader.load_template, INIT_TEMPLATE, "INIT.md template"
        )
        if template.is_err():
            return template

        registry = await load_registry(self.template_loader)
        if registry.is_err():
            return Err(_failed("Write INIT.md", registry.error))

        values = build_init_values(
            request.config, request.agent_skills_dir, registry.value.priority_repos
        )
        if values.is_err():
            return Err(_failed("Write INIT.md", values.error))

        return await self._render_and_write(
            template.value,
            values.value,
            INIT_TEMPLATE,
            request.target_dir / PROJECT_META_DIR / "INIT.md",
            "Write INIT.md",
        )

    async def _write_documents(self, request: CreateProjectInput) -> Result[None, AppError]:
        context = build_document_context(request.config)
        if context.is_err():
            return Err(_failed("Generate project documents", context.error))

        target = request.target_dir
        for template_path, output in PROJECT_DOCUMENTS:
            result = await self._render_document(template_path, context.value, target / output)
            if result.is_err():
                return result

        result = await self._write(
            target / PROJECT_META_DIR / "project-context.md",
            PROJECT_CONTEXT_MD,
            "Write project-context.md",
        )
        if result.is_err():
            return result

        return await self._render_document(
            STORIES_TEMPLATE, context.value, target / PROJECT_META_DIR / "stories" / "stories.md"
        )

    async def _render_document(
        self, template_path: str, context: dict[str, Any], output: Path
    ) -> Result[None, AppError]:
        template = await self._load(
            self.template_loader.load_template, template_path, f"{output.name} template"
        )
        if template.is_err():
            return template
        return await self._render_and_write(
            template.value, context, template_path, output, f"Write {output.name}"
        )

    async def _write_agents_md(self, request: CreateProjectInput) -> Result[None, AppError]:
        asset = await self._load(
            self.template_loader.load_file_asset, "AGENTS.md", "AGENTS.md template"
        )
        if asset.is_err():
            return asset
        content = asset.value
        if not request.config.use_simple_mem:
            content = strip_simple_mem_section(content)
        return await self._write(request.target_dir / "AGENTS.md", content, "Write AGENTS.md")

    async def _write_creator_agent(self, request: CreateProjectInput) -> Result[None, AppError]:
        config: ProjectConfig = request.config
        template = await self._load(
            self.template_loader.load_template, CREATOR_TEMPLATE, "creator agent template"
        )
        if template.is_err():
            return template

        rendered = self.renderer.render_string(
            template.value, build_creator_values(config, request.agent_skills_dir), CREATOR_TEMPLATE
        )
        if rendered.is_err():
            return Err(_failed("Render creator agent", rendered.error))
        content = rendered.value

        if config.use_relief_pilot:
            tools = await self.template_loader.load_template(CREATOR_TOOLS_TEMPLATE)
            if tools.is_ok():
                content = apply_creator_tools(content, tools.value)
            else:
                self.logger.warn(
                    "Creator tools block unavailable", {"error": tools.error.message}
                )

        return await self._write(
            request.target_dir / request.agent_agents_dir / "creator.md",
            content,
            "Write creator agent",
        )

    async def _write_editorconfig(self, request: CreateProjectInput) -> Result[None, AppError]:
        asset = await self._load(
            self.template_loader.load_file_asset, ".editorconfig", ".editorconfig template"
        )
        if asset.is_err():
            return asset
        return await self._write(
            request.target_dir / ".editorconfig", asset.value, "Write .editorconfig"
        )

    async def _write_copilot_instructions(
        self, request: CreateProjectInput
    ) -> Result[None, AppError]:
        config = request.config
        if config.ai_tool != DOTTED_INSTRUCTIONS_AGENT:
            return OK_NONE

        github_dir = request.target_dir / ".github"
        result = await self._mkdir(github_dir / "instructions", "Create .github directories")
        if result.is_err():
            return result

        asset = await self._load(
            self.template_loader.load_file_asset,
            ".github/copilot-instructions.md",
            "copilot-instructions.md template",
        )
        if asset.is_err():
            return asset
        content = asset.value
        if not config.use_relief_pilot:
            content = strip_relief_pilot_requirement(content)
        result = await self._write(
            github_dir / "copilot-instructions.md", content, "Write copilot-instructions.md"
        )
        if result.is_err() or not config.use_relief_pilot:
            return result

        relief = await self._load(
            self.template_loader.load_file_asset,
            ".github/instructions/relief-pilot.instructions.md",
            "relief-pilot instructions template",
        )
        if relief.is_err():
            return relief
        return await self._write(
            github_dir / "instructions" / "relief-pilot.instructions.md",
            relief.value,
            "Write relief-pilot instructions",
        )

    async def _write_gitignore(self, request: CreateProjectInput) -> Result[None, AppError]:
        return await self._write(
            request.target_dir / ".gitignore", generate_gitignore(), "Write .gitignore"
        )

    # ------------------------------------------------------------------
    # Port helpers
    # ------------------------------------------------------------------

    async def _mkdir(
        self, path: Path, operation: str, recursive: bool = True
    ) -> Result[None, AppError]:
        result = await self.fs.mkdir(path, recursive)
        if result.is_err():
            self.logger.error(operation, {"error": error_message(result.error)})
            return Err(_failed(operation, result.error))
        return OK_NONE

    async def _write(self, path: Path, content: str, operation: str) -> Result[None, AppError]:
        result = await self.fs.write_file(path, content)
        if result.is_err():
            self.logger.error(operation, {"error": error_message(result.error)})
            return Err(_failed(operation, result.error))
        return OK_NONE

    async def _load(
        self,
        loader: Callable[[str], Awaitable[Result[str, TemplateLoadError]]],
        logical_path: str,
        description: str,
    ) -> Result[str, AppError]:
        result = await loader(logical_path)
        if result.is_err():
            return Err(_failed(f"Load {description}", result.error))
        return Ok(result.value)

    async def _render_and_write(
        self,
        template: str,
        context: dict[str, Any],
        template_path: str,
        path: Path,
        operation: str,
    ) -> Result[None, AppError]:
        rendered = self.renderer.render_string(template, context, template_path)
        if rendered.is_err():
            return Err(_failed(operation, rendered.error))
        return await self._write(path, rendered.value, operation)
