"""Packaged template and asset loading.

Logical paths such as ``plans/init.md`` resolve against the package's
installation root, found by walking upward from this module until the
``manifest.json`` marker appears.  Templates live under ``templates/``,
verbatim file assets under ``files/``.
"""

from __future__ import annotations

from pathlib import Path

from ..errors import TemplateLoadError
from ..ports import FileReaderPort
from ..result import Err, Ok, Result

PACKAGE_MARKER = "manifest.json"
MAX_ROOT_SEARCH_LEVELS = 8

TEMPLATES_DIR = "templates"
FILES_DIR = "files"
DATA_DIR = "data"


def find_package_root(
    start_dir: str | Path, marker: str = PACKAGE_MARKER
) -> Result[Path, TemplateLoadError]:
    """Walk upward from *start_dir* looking for a directory containing *marker*."""
    current = Path(start_dir).resolve()
    for _ in range(MAX_ROOT_SEARCH_LEVELS):
        if (current / marker).is_file():
            return Ok(current)
        if current.parent == current:
            break
        current = current.parent

    return Err(
        TemplateLoadError(
            f"Could not locate {marker} starting from {start_dir}",
            "package-root-not-found",
            {"start_dir": str(start_dir)},
        )
    )


class TemplateLoader:
    """Loads templates and file assets shipped with the package.

    The package root is looked up once per loader and then reused; it cannot
    change during a run.
    """

    def __init__(self, fs: FileReaderPort, start_dir: str | Path | None = None) -> None:
        self.fs = fs
        self.start_dir = Path(start_dir) if start_dir is not None else Path(__file__).parent
        self._package_root: Path | None = None

    def package_root(self) -> Result[Path, TemplateLoadError]:
        if self._package_root is not None:
            return Ok(self._package_root)
        found = find_package_root(self.start_dir)
        if found.is_ok():
            self._package_root = found.value
        return found

    def resolve(self, subdir: str, logical_path: str) -> Result[Path, TemplateLoadError]:
        root = self.package_root()
        if root.is_err():
            return root
        return Ok(root.value / subdir / logical_path)

    async def load_template(self, logical_path: str) -> Result[str, TemplateLoadError]:
        """Read ``templates/<logical_path>``."""
        return await self._load(TEMPLATES_DIR, logical_path, "template")

    async def load_file_asset(self, logical_path: str) -> Result[str, TemplateLoadError]:
        """Read ``files/<logical_path>``."""
        return await self._load(FILES_DIR, logical_path, "file asset")

    async def load_data(self, logical_path: str) -> Result[str, TemplateLoadError]:
        """Read ``data/<logical_path>`` (e.g. the skill registry)."""
        return await self._load(DATA_DIR, logical_path, "data file")

    async def _load(
        self, subdir: str, logical_path: str, kind: str
    ) -> Result[str, TemplateLoadError]:
        resolved = self.resolve(subdir, logical_path)
        if resolved.is_err():
            return resolved

        result = await self.fs.read_file(resolved.value)
        if result.is_ok():
            return Ok(result.value)

        return Err(
            TemplateLoadError(
                f"Failed to load {kind}: {getattr(result.error, 'message', result.error)}",
                logical_path,
            )
        )
