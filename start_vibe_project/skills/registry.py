"""Loading of the packaged skill registry.

A missing, unparsable or schema-invalid registry is a packaging defect and
is reported as ``InternalError``.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..errors import InternalError, error_message
from ..models import SkillRegistry
from ..ports import TemplateLoaderPort
from ..result import Err, Ok, Result

REGISTRY_FILE = "skill-registry.json"


def parse_registry(raw: str) -> Result[SkillRegistry, InternalError]:
    """Parse and validate registry JSON text."""
    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        return Err(InternalError(f"Skill registry is not valid JSON: {exc}"))

    try:
        registry = SkillRegistry.model_validate(data)
    except PydanticValidationError as exc:
        return Err(
            InternalError(
                "Skill registry validation failed",
                {
                    "errors": exc.errors(
                        include_url=False, include_context=False, include_input=False
                    )
                },
            )
        )
    return Ok(registry)


async def load_registry(loader: TemplateLoaderPort) -> Result[SkillRegistry, InternalError]:
    """Read ``data/skill-registry.json`` through *loader* and validate it."""
    raw = await loader.load_data(REGISTRY_FILE)
    if raw.is_err():
        return Err(
            InternalError(
                f"Skill registry not found: {error_message(raw.error)}",
                {"registry": REGISTRY_FILE},
            )
        )
    return parse_registry(raw.value)
