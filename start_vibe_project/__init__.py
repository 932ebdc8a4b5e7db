"""start-vibe-project: scaffold a documentation-first project for an AI coding agent.

Creates the ``.project/`` planning documents, agent instructions and skills
for the chosen coding agent, then initialises git.

Quick usage::

    from start_vibe_project import ProjectCreator, ProjectConfig

    config = ProjectConfig(name="demo", ai_tool="claude-code")
    result = await creator.create(CreateProjectInput(config=config, ...))
"""

from start_vibe_project.errors import AppError
from start_vibe_project.models import CreateProjectInput, ProjectConfig
from start_vibe_project.pipeline import ProjectCreator
from start_vibe_project.result import Err, Ok, Result

__version__ = "0.1.0"

__all__ = [
    "AppError",
    "CreateProjectInput",
    "Err",
    "Ok",
    "ProjectConfig",
    "ProjectCreator",
    "Result",
]
