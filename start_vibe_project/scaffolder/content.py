"""Content for the generated project documents.

Builds the render contexts for the ``.project/`` documents and ``INIT.md``,
and holds the plain-text edits applied to packaged assets: removing the
SimpleMem section from ``AGENTS.md``, removing the Relief Pilot requirement
from the Copilot instructions, and merging the Relief Pilot tools line into
the creator agent.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

from ..errors import ValidationError
from ..models import ProjectConfig
from ..result import Err, Ok, Result
from .templates import title_words

# Logical template path -> output path relative to the project root.
PROJECT_DOCUMENTS: tuple[tuple[str, str], ...] = (
    ("docs/about.md.j2", ".project/about.md"),
    ("docs/specs.md.j2", ".project/specs.md"),
    ("docs/architecture.md.j2", ".project/architecture.md"),
)
STORIES_TEMPLATE = "docs/stories.md.j2"
INIT_TEMPLATE = "plans/init.md"
CREATOR_TEMPLATE = "agents/creator.md"
CREATOR_TOOLS_TEMPLATE = "agents/creator-tools.md"

PROJECT_CONTEXT_MD = "# Project Context\n\n_Living document that grows with the project._\n"

STACK_DISPLAY_NAMES: dict[str, str] = {
    "react-vite": "React + Vite",
    "nextjs": "Next.js",
    "vue": "Vue.js",
    "nuxtjs": "Nuxt.js",
    "fastapi": "FastAPI",
    "django": "Django",
    "flask": "Flask",
    "express": "Express.js",
    "nestjs": "NestJS",
    "postgresql": "PostgreSQL",
    "mysql": "MySQL",
    "mongodb": "MongoDB",
    "turso": "Turso",
    "other": "To be specified",
}

_FRONTEND_ROWS: dict[str, list[dict[str, str]]] = {
    "react-vite": [
        {"name": "React", "purpose": "UI framework"},
        {"name": "Vite", "purpose": "Build tool + dev server"},
    ],
    "nextjs": [{"name": "Next.js", "purpose": "Full-stack React framework"}],
    "vue": [{"name": "Vue", "purpose": "UI framework"}],
    "nuxtjs": [{"name": "Nuxt", "purpose": "Full-stack Vue framework"}],
}

_BACKEND_ROWS: dict[str, list[dict[str, str]]] = {
    "fastapi": [{"name": "FastAPI", "purpose": "API framework"}],
    "django": [{"name": "Django", "purpose": "Web framework"}],
    "flask": [{"name": "Flask", "purpose": "Web framework"}],
    "express": [{"name": "Express", "purpose": "HTTP framework"}],
    "nestjs": [{"name": "NestJS", "purpose": "Node.js framework"}],
}

_DASH_COMMAND_AGENTS = frozenset({"github-copilot", "cursor", "windsurf"})

_SIMPLE_MEM_SECTION = re.compile(r"\n## SimpleMem Instructions[\s\S]*?<!-- SIMPLEMEM:END -->\n?")
_RELIEF_PILOT_REQUIREMENT = re.compile(
    r"## 0\. Critical Requirement[\s\S]*?\n## 1\. Mandatory Protocols\n"
)
_TOOLS_LINE = re.compile(r"^tools:.*$", re.MULTILINE)


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def stack_display_name(stack: str) -> str:
    """Human-readable name of a stack id.

    Args:
        stack: Stack id such as ``react-vite``.

    Returns:
        The display name (``React + Vite``), or *stack* itself when the id
        is not in ``STACK_DISPLAY_NAMES``.
    """
    return STACK_DISPLAY_NAMES.get(stack, stack)


def template_display_name(template: str) -> str:
    """Title-case a template id: ``web-app`` becomes ``Web App``.

    Args:
        template: Template id.

    Returns:
        The hyphen-separated words of *template*, each capitalised.
    """
    return title_words(template)


def opsx_ff_command(ai_tool: str) -> str:
    """Slash command that starts the first OpenSpec change for *ai_tool*."""
    if ai_tool in _DASH_COMMAND_AGENTS:
        return "/opsx-ff initial-setup"
    return "/opsx:ff initial-setup"


def format_component_display(
    enabled: bool, stack: Optional[str], label: str
) -> Result[str, ValidationError]:
    """``No`` for a disabled component, ``Yes (<stack>)`` for an enabled one.

    Args:
        enabled: Whether the component is part of the project.
        stack: Stack id chosen for the component, if any.
        label: Field name reported when the stack is missing.

    Returns:
        The display label, or ``ValidationError`` for an enabled component
        without a stack.
    """
    if not enabled:
        return Ok("No")
    if not stack:
        return Err(
            ValidationError(
                f"{label} is required when the component is enabled.", {"field": label}
            )
        )
    return Ok(f"Yes ({stack})")


def _stack_rows(
    stack: Optional[str], table: dict[str, list[dict[str, str]]], kind: str
) -> list[dict[str, str]]:
    if not stack or stack == "other":
        return [{"name": f"TBD (select {kind} framework)", "purpose": "Core framework"}]
    return table.get(stack, [{"name": stack, "purpose": "Core framework"}])


def priority_skill_list(priority_repos: list[str]) -> str:
    """Markdown bullet list of ``skills add --list`` commands.

    Args:
        priority_repos: Repositories from the registry's priority list.

    Returns:
        One indented bullet per repository, or a single placeholder bullet
        when *priority_repos* is empty.
    """
    if not priority_repos:
        return "  - _No priority repos configured in skill-registry.json_"
    return "\n".join(f"  - `npx skills add {repo} --list`" for repo in priority_repos)


# ---------------------------------------------------------------------------
# Render contexts
# ---------------------------------------------------------------------------


def _component_displays(config: ProjectConfig) -> Result[dict[str, str], ValidationError]:
    components = config.components
    displays: dict[str, str] = {}
    for component, enabled, stack in (
        ("frontend", components.frontend, config.frontend_stack),
        ("backend", components.backend, config.backend_stack),
        ("database", components.database, config.database_stack),
    ):
        formatted = format_component_display(enabled, stack, f"{component}_stack")
        if formatted.is_err():
            return formatted
        displays[f"{component}_component"] = formatted.value
    displays["auth_component"] = "Yes" if components.auth else "No"
    return Ok(displays)


def build_document_context(config: ProjectConfig) -> Result[dict[str, Any], ValidationError]:
    """Context shared by the ``docs/*.md.j2`` templates.

    Args:
        config: Validated project configuration.

    Returns:
        The render context, or ``ValidationError`` when an enabled component
        has no stack.
    """
    displays = _component_displays(config)
    if displays.is_err():
        return displays

    return Ok(
        {
            "name": config.name,
            "description": config.description,
            "template": config.template,
            "template_name": template_display_name(config.template),
            "components": config.components.model_dump(),
            "frontend_display": stack_display_name(config.frontend_stack or "TBD"),
            "backend_display": stack_display_name(config.backend_stack or "TBD"),
            "database_display": stack_display_name(config.database_stack or "TBD"),
            "frontend_rows": _stack_rows(config.frontend_stack, _FRONTEND_ROWS, "frontend"),
            "backend_rows": _stack_rows(config.backend_stack, _BACKEND_ROWS, "backend"),
            **displays.value,
        }
    )


def build_init_values(
    config: ProjectConfig,
    skills_dir: str,
    priority_repos: list[str],
    created: Optional[datetime] = None,
) -> Result[dict[str, str], ValidationError]:
    """Placeholder values for ``plans/init.md``.

    Args:
        config: Validated project configuration.
        skills_dir: Agent-specific skills directory, relative to the project.
        priority_repos: Repositories listed as priority skill sources.
        created: Creation timestamp; defaults to now (UTC).

    Returns:
        ``{{key}}`` substitutions for the plan, or ``ValidationError`` when
        an enabled component has no stack.
    """
    displays = _component_displays(config)
    if displays.is_err():
        return displays

    created = created or datetime.now(timezone.utc)
    return Ok(
        {
            "aiTool": config.ai_tool,
            "skillsDir": skills_dir,
            "name": config.name,
            "templateName": template_display_name(config.template),
            "createdDate": created.date().isoformat(),
            "prioritySkillList": priority_skill_list(priority_repos),
            "opsxFFCommand": opsx_ff_command(config.ai_tool),
            "frontendComponent": displays.value["frontend_component"],
            "backendComponent": displays.value["backend_component"],
            "databaseComponent": displays.value["database_component"],
            "authComponent": displays.value["auth_component"],
        }
    )


def build_creator_values(config: ProjectConfig, skills_dir: str) -> dict[str, str]:
    """Placeholder values for ``agents/creator.md``.

    Args:
        config: Validated project configuration.
        skills_dir: Agent-specific skills directory, relative to the project.

    Returns:
        The ``aiTool`` and ``skillsDir`` substitutions.
    """
    return {"aiTool": config.ai_tool, "skillsDir": skills_dir}


# ---------------------------------------------------------------------------
# Static content
# ---------------------------------------------------------------------------


def generate_gitignore() -> str:
    """Returns the ``.gitignore`` written to every new project."""
    return """# Dependencies
node_modules/
.pnpm-store/

# Build outputs
dist/
build/
.next/
.nuxt/
.output/

# Environment
.env
.env.local
.env.*.local

# IDE
.idea/
.vscode/
*.swp
*.swo
.DS_Store

# Logs
*.log
npm-debug.log*
yarn-debug.log*
yarn-error.log*

# Testing
coverage/

# Misc
.cache/
tmp/
"""


# ---------------------------------------------------------------------------
# Text edits on packaged assets
# ---------------------------------------------------------------------------


def strip_simple_mem_section(content: str) -> str:
    """Remove every ``## SimpleMem Instructions`` ... ``<!-- SIMPLEMEM:END -->`` block."""
    return _SIMPLE_MEM_SECTION.sub("\n", content)


def strip_relief_pilot_requirement(content: str) -> str:
    """Drop section 0 so the document starts at ``## 1. Mandatory Protocols``."""
    return _RELIEF_PILOT_REQUIREMENT.sub("## 1. Mandatory Protocols\n", content, count=1)


def apply_creator_tools(content: str, tools_block: str) -> str:
    """Replace the first ``tools:`` line with the trimmed *tools_block*.

    Args:
        content: Creator agent definition.
        tools_block: Replacement text, inserted literally.

    Returns:
        *content* with only its first ``tools:`` line replaced; later
        ``tools:`` lines are left untouched.
    """
    replacement = tools_block.strip()
    return _TOOLS_LINE.sub(lambda _: replacement, content, count=1)
