"""Command-line entry point and composition root.

Builds ``Settings`` and every port exactly once, validates the project
configuration at the boundary, and hands a ``CreateProjectInput`` to the
pipeline.

Usage::

    start-vibe-project my-app --frontend react-vite --backend express --ai-tool claude-code
    start-vibe-project --list-agents
    python -m start_vibe_project my-lib --template library --ai-tool codex
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from rich.markup import escape
from rich.table import Table
from rich.traceback import Traceback

from .agents import AGENTS, detect_installed_agents, get_agent_config
from .config import Settings
from .errors import AppError, OperationCancelledError, ValidationError, normalize_error
from .infra import (
    ConsoleLogger,
    LocalFileSystem,
    ProgressTracker,
    ShellRunner,
    Spinner,
    TemplateLoader,
)
from .models import AgentConfig, CreateProjectInput, ProjectConfig, ProjectTemplate
from .pipeline import ProjectCreator
from .result import Err, Ok, Result
from .scaffolder.content import stack_display_name, template_display_name
from .skills import SkillInstaller
from .utils import (
    console,
    err_console,
    format_duration,
    print_error,
    print_panel,
    print_summary_table,
)

EXIT_FAILURE = 1
EXIT_CANCELLED = 130


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="start-vibe-project",
        description="Scaffold a documentation-first project for an AI coding agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  start-vibe-project my-app --frontend react-vite --backend express\n"
            "  start-vibe-project my-api --template api-service --backend fastapi "
            "--database postgresql --auth\n"
            "  start-vibe-project --list-agents\n"
        ),
    )

    parser.add_argument(
        "name",
        nargs="?",
        help="Project name: lowercase letters, numbers and hyphens, starting with a letter",
    )
    parser.add_argument(
        "--template", "-t",
        default=ProjectTemplate.WEB_APP.value,
        choices=[template.value for template in ProjectTemplate],
        help="Project template (default: web-app)",
    )
    parser.add_argument("--description", "-d", default="", help="Short project description")
    parser.add_argument("--frontend", metavar="STACK", help="Enable frontend with STACK")
    parser.add_argument("--backend", metavar="STACK", help="Enable backend with STACK")
    parser.add_argument("--database", metavar="STACK", help="Enable database with STACK")
    parser.add_argument("--auth", action="store_true", help="Enable authentication")
    parser.add_argument(
        "--ai-tool", "-a",
        default="claude-code",
        help="Target coding agent (default: claude-code, see --list-agents)",
    )
    parser.add_argument(
        "--simple-mem", action="store_true", help="Keep the SimpleMem section in AGENTS.md"
    )
    parser.add_argument(
        "--relief-pilot", action="store_true", help="Enable Relief Pilot instructions and tools"
    )
    parser.add_argument(
        "--list-agents", action="store_true", help="List supported coding agents and exit"
    )
    return parser


def build_config(args: argparse.Namespace) -> Result[ProjectConfig, ValidationError]:
    """Validate parsed arguments into a ``ProjectConfig``."""
    try:
        config = ProjectConfig(
            name=args.name or "",
            template=args.template,
            description=args.description,
            components={
                "frontend": bool(args.frontend),
                "backend": bool(args.backend),
                "database": bool(args.database),
                "auth": args.auth,
            },
            frontend_stack=args.frontend,
            backend_stack=args.backend,
            database_stack=args.database,
            ai_tool=args.ai_tool,
            use_simple_mem=args.simple_mem,
            use_relief_pilot=args.relief_pilot,
        )
    except PydanticValidationError as exc:
        first = exc.errors(include_url=False)[0]
        return Err(
            ValidationError(
                first["msg"].removeprefix("Value error, "),
                {"field": ".".join(str(part) for part in first["loc"]) or "config"},
            )
        )
    return Ok(config)


def resolve_agent(ai_tool: str) -> Result[AgentConfig, ValidationError]:
    agent = get_agent_config(ai_tool)
    if agent is None:
        return Err(
            ValidationError(f"Unknown AI tool: {ai_tool}", {"available": sorted(AGENTS)})
        )
    return Ok(agent)


# ---------------------------------------------------------------------------
# Composition root
# ---------------------------------------------------------------------------


def compose(settings: Settings, progress_path: Path) -> tuple[ProjectCreator, ProgressTracker]:
    """Construct every port once and wire them into a ``ProjectCreator``."""
    logger = ConsoleLogger(settings.log_level)
    fs = LocalFileSystem(base_dir=settings.cwd)
    loader = TemplateLoader(fs)
    shell = ShellRunner(default_timeout=settings.command_timeout)
    spinner = Spinner()
    tracker = ProgressTracker(progress_path, fs, logger)
    installer = SkillInstaller(
        shell,
        fs,
        loader,
        logger,
        spinner,
        skills_cli=settings.skills_cli,
        timeout=settings.skills_timeout,
    )
    creator = ProjectCreator(
        fs,
        loader,
        shell,
        logger,
        tracker,
        installer,
        spinner,
        companion_package=settings.companion_package,
        companion_timeout=settings.companion_timeout,
    )
    return creator, tracker


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def report_error(error: BaseException, debug: bool = False) -> None:
    """Print ``Error: <message>``; with *debug*, the code, context and traceback too."""
    message = error.message if isinstance(error, AppError) else str(error) or type(error).__name__
    print_error(f"Error: {escape(message)}")
    if not debug:
        return

    if isinstance(error, AppError):
        err_console.print(f"[dim]Code:[/dim] {error.code}", highlight=False)
        if error.context:
            err_console.print(
                f"[dim]Context:[/dim] {escape(json.dumps(error.context, indent=2, default=str))}",
                highlight=False,
            )
    if error.__traceback__ is not None:
        err_console.print(Traceback.from_exception(type(error), error, error.__traceback__))


def print_agents(home_dir: Path) -> None:
    installed = set(detect_installed_agents(home_dir))
    table = Table(title="Supported AI tools", header_style="bold cyan")
    table.add_column("ID", no_wrap=True)
    table.add_column("Name")
    table.add_column("Skills dir", style="dim")
    table.add_column("Installed", justify="center")
    for agent in AGENTS.values():
        table.add_row(
            agent.name,
            agent.display_name,
            agent.skills_dir,
            "[green]yes[/green]" if agent.name in installed else "",
        )
    console.print(table)


def _component_summary(enabled: bool, stack: Optional[str]) -> str:
    if not enabled:
        return "No"
    return stack_display_name(stack) if stack else "Yes"


def print_config_summary(config: ProjectConfig, agent: AgentConfig, target_dir: Path) -> None:
    components = config.components
    print_summary_table(
        {
            "Project": config.name,
            "Template": template_display_name(config.template),
            "Description": config.description or "-",
            "Frontend": _component_summary(components.frontend, config.frontend_stack),
            "Backend": _component_summary(components.backend, config.backend_stack),
            "Database": _component_summary(components.database, config.database_stack),
            "Authentication": "Yes" if components.auth else "No",
            "AI tool": agent.display_name,
            "SimpleMem": "Yes" if config.use_simple_mem else "No",
            "Relief Pilot": "Yes" if config.use_relief_pilot else "No",
            "Directory": str(target_dir),
        },
        title="Project configuration",
    )


def print_next_steps(config: ProjectConfig, agent: AgentConfig, elapsed: float) -> None:
    headline = f"Project {config.name} created in {format_duration(elapsed)}."
    print_panel(
        f"[bold green]{headline}[/bold green]\n\n"
        "Next steps:\n"
        f"  1. cd {config.name}\n"
        f"  2. Open the project in {agent.display_name}\n"
        "  3. Ask the creator agent to follow .project/INIT.md",
        title="Done",
        style="green",
    )


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Validate, create the project, and report.  Returns the exit code."""
    config = build_config(args)
    if config.is_err():
        report_error(config.error, settings.debug)
        return EXIT_FAILURE

    agent = resolve_agent(config.value.ai_tool)
    if agent.is_err():
        report_error(agent.error, settings.debug)
        return EXIT_FAILURE

    project = config.value
    target_dir = settings.target_dir(project.name)
    if target_dir.exists():
        report_error(
            ValidationError(
                f"Directory {project.name} already exists", {"path": str(target_dir)}
            ),
            settings.debug,
        )
        return EXIT_FAILURE

    print_config_summary(project, agent.value, target_dir)

    progress_path = settings.progress_path(project.name)
    creator, tracker = compose(settings, progress_path)
    request = CreateProjectInput(
        config=project,
        target_dir=target_dir,
        agent_skills_dir=agent.value.skills_dir,
        agent_agents_dir=agent.value.agents_dir,
    )

    started = time.monotonic()
    try:
        result = await creator.create(request)
    except asyncio.CancelledError:
        await tracker.mark_cancelled()
        raise

    await tracker.flush()
    if result.is_err():
        report_error(result.error, settings.debug)
        console.print(f"[dim]Progress saved to {progress_path}[/dim]", highlight=False)
        return EXIT_FAILURE

    # A finished run leaves nothing to diagnose.
    await asyncio.to_thread(progress_path.unlink, missing_ok=True)
    print_next_steps(project, agent.value, time.monotonic() - started)
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``start-vibe-project`` and ``python -m start_vibe_project``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except (PydanticValidationError, ValueError) as exc:
        report_error(ValidationError(f"Invalid environment configuration: {exc}"))
        sys.exit(EXIT_FAILURE)

    if args.list_agents:
        print_agents(settings.home_dir)
        return

    if not args.name:
        parser.error("the project name is required")

    try:
        exit_code = asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        report_error(OperationCancelledError(), settings.debug)
        sys.exit(EXIT_CANCELLED)
    except Exception as exc:
        report_error(normalize_error(exc), settings.debug)
        sys.exit(EXIT_FAILURE)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
