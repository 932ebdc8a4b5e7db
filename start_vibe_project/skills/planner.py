"""Selection of skills for a project configuration.

The configuration is reduced to a set of capability tags; a registry skill
is selected when any of its tags is in that set.  Sources with no selected
skill are left out of the plan.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from ..models import PlannedSource, ProjectConfig, SkillInstallPlan, SkillSource
from ..ports import LoggerPort

BASELINE_TAG = "common"

FRONTEND_STACK_TAGS: dict[str, list[str]] = {
    "react-vite": ["react"],
    "react": ["react"],
    "nextjs": ["nextjs"],
    "vue": ["vue"],
    "nuxtjs": ["nuxtjs"],
    "svelte": ["svelte"],
    "react-native": ["react-native"],
    "flutter": ["flutter"],
}

BACKEND_STACK_TAGS: dict[str, list[str]] = {
    "fastapi": ["fastapi"],
    "django": ["django"],
    "flask": ["flask"],
    "express": ["express"],
    "nestjs": ["nestjs"],
    "node": ["node"],
    "python": ["python"],
    "go": ["go"],
}

DATABASE_STACK_TAGS: dict[str, list[str]] = {
    "postgresql": ["postgresql"],
    "postgres": ["postgresql"],
    "mysql": ["mysql"],
    "mongodb": ["mongodb"],
    "turso": ["turso"],
}


def _stack_tags(stack_id: str | None, table: dict[str, list[str]]) -> list[str]:
    # Unknown stacks add nothing.
    if not stack_id:
        return []
    return table.get(stack_id, [])


def select_tags(config: ProjectConfig) -> set[str]:
    """Return the capability tags implied by *config*."""
    tags = {BASELINE_TAG}
    components = config.components

    if components.frontend:
        tags.add("mobile" if config.template == "mobile-app" else "frontend")
        tags.add("design")
        tags.update(_stack_tags(config.frontend_stack, FRONTEND_STACK_TAGS))

    if components.backend:
        tags.add("backend")
        tags.update(_stack_tags(config.backend_stack, BACKEND_STACK_TAGS))

    if components.database:
        tags.add("database")
        tags.update(_stack_tags(config.database_stack, DATABASE_STACK_TAGS))

    if components.auth:
        tags.add("auth")

    return tags


def _is_tag_collection(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset)) and all(
        isinstance(tag, str) for tag in value
    )


def build_install_plan(
    sources: Iterable[SkillSource],
    selected_tags: set[str],
    logger: Optional[LoggerPort] = None,
) -> SkillInstallPlan:
    """Keep, per source, the skills whose tags intersect *selected_tags*.

    Malformed skills (tags that are not a collection of strings, or a blank
    name) are skipped with a warning.
    """
    planned: list[PlannedSource] = []

    for source in sources:
        skills: list[str] = []
        for skill in source.skills:
            if not _is_tag_collection(skill.tags):
                if logger is not None:
                    logger.warn(f"Skill tags must be an array for {source.label}/{skill.name}")
                continue

            name = skill.name.strip()
            if not name:
                if logger is not None:
                    logger.warn(f"Skill name cannot be empty for {source.label}")
                continue

            if selected_tags.intersection(skill.tags) and name not in skills:
                skills.append(name)

        if skills:
            planned.append(PlannedSource(id=source.id, label=source.label, skills=skills))

    return SkillInstallPlan(sources=planned)
