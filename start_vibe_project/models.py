"""Pydantic v2 models for the project-creation pipeline.

Defines the validated project configuration handed to the pipeline, the
agent descriptor, the skill registry schema, the derived install plan, and
the persisted progress snapshot.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


PROJECT_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ProjectTemplate(str, Enum):
    """Kind of project being scaffolded."""
    WEB_APP = "web-app"
    MOBILE_APP = "mobile-app"
    API_SERVICE = "api-service"
    LIBRARY = "library"
    EMPTY = "empty"


class ProgressStatus(str, Enum):
    """Lifecycle of a pipeline run as recorded in the progress file."""
    IN_PROGRESS = "in-progress"
    ERROR = "error"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------

class ProjectComponents(BaseModel):
    """The four independent project facets."""
    model_config = ConfigDict(frozen=True)

    frontend: bool = False
    backend: bool = False
    database: bool = False
    auth: bool = False


class ProjectConfig(BaseModel):
    """Validated, immutable input to the project-creation pipeline.

    A stack identifier is required whenever its component is enabled.  The
    check lives here, at the boundary, so the pipeline never re-validates
    business rules.
    """
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: str = Field(..., description="Lowercase project identifier")
    template: ProjectTemplate = Field(default=ProjectTemplate.WEB_APP, validate_default=True)
    description: str = Field(default="")
    components: ProjectComponents = Field(default_factory=ProjectComponents)
    frontend_stack: Optional[str] = Field(default=None)
    backend_stack: Optional[str] = Field(default=None)
    database_stack: Optional[str] = Field(default=None)
    ai_tool: str = Field(..., description="Identifier of the target coding agent")
    use_simple_mem: bool = Field(default=False)
    use_relief_pilot: bool = Field(default=False)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value:
            raise ValueError("Project name is required")
        if not PROJECT_NAME_PATTERN.match(value):
            raise ValueError(
                "Name must be lowercase, start with a letter, and contain only "
                "letters, numbers, and hyphens"
            )
        return value

    @model_validator(mode="after")
    def _check_stacks(self) -> "ProjectConfig":
        for component in ("frontend", "backend", "database"):
            enabled = getattr(self.components, component)
            if enabled and not getattr(self, f"{component}_stack"):
                raise ValueError(
                    f"{component}_stack is required when {component} is enabled"
                )
        return self


class AgentConfig(BaseModel):
    """Static descriptor of one supported coding agent."""
    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    skills_dir: str = Field(..., description="Project-relative skills directory")
    agents_dir: str = Field(..., description="Project-relative agents directory")
    global_skills_dir: str = Field(
        ..., description="Home-relative skills directory, used for local detection only"
    )


class CreateProjectInput(BaseModel):
    """Everything the pipeline needs to materialise one project."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    config: ProjectConfig
    target_dir: Path
    agent_skills_dir: str
    agent_agents_dir: str


# ---------------------------------------------------------------------------
# Skill registry
# ---------------------------------------------------------------------------

class SkillEntry(BaseModel):
    """One installable skill inside a registry source.

    ``tags`` is checked by the planner rather than by the schema so one
    malformed entry is skipped with a warning instead of rejecting the
    whole registry.
    """
    name: str
    tags: Any = None


class SkillSource(BaseModel):
    """A skill bundle repository and the skills it exposes."""
    id: str = Field(..., min_length=1)
    label: str
    skills: list[SkillEntry] = Field(default_factory=list)


class SkillRegistry(BaseModel):
    """Packaged, read-only registry of skill sources."""
    start_skills: list[SkillSource]
    priority_repos: list[str] = Field(default_factory=list)


class PlannedSource(BaseModel):
    """The skills of one source selected for installation."""
    id: str
    label: str
    skills: list[str] = Field(default_factory=list)


class SkillInstallPlan(BaseModel):
    """Ordered selection of sources and skills; empty sources are never present."""
    sources: list[PlannedSource] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.sources

    def source_ids(self) -> list[str]:
        return [source.id for source in self.sources]


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------

class ProgressState(BaseModel):
    """Snapshot persisted after every pipeline transition."""
    model_config = ConfigDict(use_enum_values=True)

    status: ProgressStatus = Field(default=ProgressStatus.IN_PROGRESS, validate_default=True)
    steps: list[str] = Field(default_factory=list)
    last_step: Optional[str] = None
    updated_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    error: Optional[str] = None
