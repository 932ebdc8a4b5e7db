"""start-vibe-project runtime configuration.

Centralised, typed settings for the CLI and the project-creation pipeline.
Settings use a Pydantic v2 model so they are validated at construction time.
The environment is read exactly once, by ``Settings.from_env()`` in the
composition root; every other module receives values through constructors.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

LogLevel = Literal["debug", "info", "warn", "error"]

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Global start-vibe-project settings."""

    log_level: LogLevel = Field(default="error")
    debug: bool = Field(default=False, description="Show tracebacks and error context")

    command_timeout: float = Field(
        default=300.0, gt=0, description="Default timeout for external commands, in seconds"
    )
    skills_timeout: float = Field(
        default=300.0, gt=0, description="Timeout for one skills-installer invocation"
    )
    companion_timeout: float = Field(
        default=120.0, gt=0, description="Timeout for the global companion-tool install"
    )

    progress_dir: str = Field(default=".start-vibe-project")
    companion_package: str = Field(default="@fission-ai/openspec")
    skills_cli: str = Field(default="npx")

    cwd: Path = Field(default_factory=Path.cwd)
    home_dir: Path = Field(default_factory=Path.home)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    def progress_path(self, project_name: str) -> Path:
        """Progress file for *project_name*: ``<cwd>/<progress_dir>/<name>.json``."""
        return self.cwd / self.progress_dir / f"{project_name}.json"

    def target_dir(self, project_name: str) -> Path:
        """Directory the project is materialised into."""
        return self.cwd / project_name

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            SVP_LOG_LEVEL, SVP_DEBUG, SVP_COMMAND_TIMEOUT, SVP_SKILLS_TIMEOUT,
            SVP_COMPANION_TIMEOUT, SVP_PROGRESS_DIR, SVP_COMPANION_PACKAGE,
            SVP_SKILLS_CLI.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}

        if env.get("SVP_LOG_LEVEL"):
            kwargs["log_level"] = env["SVP_LOG_LEVEL"].strip().lower()
        if env.get("SVP_DEBUG"):
            kwargs["debug"] = env["SVP_DEBUG"].strip().lower() in _TRUTHY
        if env.get("SVP_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = float(env["SVP_COMMAND_TIMEOUT"])
        if env.get("SVP_SKILLS_TIMEOUT"):
            kwargs["skills_timeout"] = float(env["SVP_SKILLS_TIMEOUT"])
        if env.get("SVP_COMPANION_TIMEOUT"):
            kwargs["companion_timeout"] = float(env["SVP_COMPANION_TIMEOUT"])
        if env.get("SVP_PROGRESS_DIR"):
            kwargs["progress_dir"] = env["SVP_PROGRESS_DIR"]
        if env.get("SVP_COMPANION_PACKAGE"):
            kwargs["companion_package"] = env["SVP_COMPANION_PACKAGE"]
        if env.get("SVP_SKILLS_CLI"):
            kwargs["skills_cli"] = env["SVP_SKILLS_CLI"]

        return cls(**kwargs)
