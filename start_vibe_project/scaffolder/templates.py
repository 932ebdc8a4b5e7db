"""Jinja2 rendering of packaged markdown templates.

Templates use ``{{ placeholder }}`` substitution only.  Rendering is strict:
an undefined placeholder, a syntax error, or placeholder syntax surviving in
the output is reported as ``TemplateLoadError`` instead of leaking into a
generated document.
"""

from __future__ import annotations

import re
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError, select_autoescape

from ..errors import TemplateLoadError
from ..result import Err, Ok, Result

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


def find_unresolved(content: str) -> list[str]:
    """Distinct placeholder names still present in *content*, in order of appearance."""
    names: list[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(content):
        name = match.group(1).strip()
        if name not in names:
            names.append(name)
    return names


class TemplateRenderer:
    """Renders template text with a context of fully resolved values."""

    def __init__(self) -> None:
        self.env = Environment(
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["title_words"] = title_words

    def render_string(
        self, template_string: str, context: dict[str, Any], template_path: str = "<string>"
    ) -> Result[str, TemplateLoadError]:
        """Render *template_string* with *context*.

        *template_path* is the logical name reported in errors.
        """
        try:
            rendered = self.env.from_string(template_string).render(**context)
        except TemplateError as exc:
            return Err(
                TemplateLoadError(
                    f"Template rendering failed: {exc.message or exc}", template_path
                )
            )

        unresolved = find_unresolved(rendered)
        if unresolved:
            return Err(
                TemplateLoadError(
                    f"Template placeholders not resolved: {', '.join(unresolved)}",
                    template_path,
                    {"unresolved": unresolved},
                )
            )
        return Ok(rendered)


# ---------------------------------------------------------------------------
# Custom Jinja2 filters
# ---------------------------------------------------------------------------


def title_words(value: str) -> str:
    """Convert ``'web-app'`` to ``'Web App'``."""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), value.replace("-", " "))
