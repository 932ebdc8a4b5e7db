"""Ports over the outside world: filesystem, packaged assets, processes,
console logging, spinners, and the progress file.

Quick usage::

    from start_vibe_project.infra import LocalFileSystem, TemplateLoader

    fs = LocalFileSystem(base_dir="/work")
    loader = TemplateLoader(fs)
    result = await loader.load_template("plans/init.md")
"""

from start_vibe_project.infra.assets import TemplateLoader, find_package_root
from start_vibe_project.infra.fs import LocalFileSystem, assert_within
from start_vibe_project.infra.logger import ConsoleLogger
from start_vibe_project.infra.progress import ProgressTracker
from start_vibe_project.infra.shell import CommandOutput, ShellRunner
from start_vibe_project.infra.spinner import Spinner, SpinnerHandle

__all__ = [
    "CommandOutput",
    "ConsoleLogger",
    "LocalFileSystem",
    "ProgressTracker",
    "ShellRunner",
    "Spinner",
    "SpinnerHandle",
    "TemplateLoader",
    "assert_within",
    "find_package_root",
]
