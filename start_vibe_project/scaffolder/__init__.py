"""Document generation for new projects.

Renders the ``.project/`` documents, ``INIT.md`` and the creator agent from
packaged Jinja2 templates, and applies the feature-dependent edits to the
packaged ``AGENTS.md`` and Copilot instructions.
"""

from start_vibe_project.scaffolder.content import (
    apply_creator_tools,
    build_document_context,
    build_init_values,
    strip_relief_pilot_requirement,
    strip_simple_mem_section,
)
from start_vibe_project.scaffolder.templates import TemplateRenderer

__all__ = [
    "TemplateRenderer",
    "apply_creator_tools",
    "build_document_context",
    "build_init_values",
    "strip_relief_pilot_requirement",
    "strip_simple_mem_section",
]
