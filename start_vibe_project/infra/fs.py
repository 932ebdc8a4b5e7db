"""Filesystem port over the real filesystem.

All operations except ``exists`` return a ``Result``; raw ``OSError`` never
crosses the port boundary.  When the port is constructed with a base
directory, ``write_file`` and ``copy_file`` refuse any path that escapes it.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import stat
from pathlib import Path

from ..errors import FileSystemError, PathSecurityError
from ..result import OK_NONE, Err, Ok, Result


# ---------------------------------------------------------------------------
# Path-safety guard
# ---------------------------------------------------------------------------


def assert_within(base_dir: str | Path, target_path: str | Path) -> Result[None, PathSecurityError]:
    """Check that *target_path* lies strictly inside *base_dir*.

    Both paths are resolved to absolute canonical form first.  The target
    must not be the base itself, must share the base's drive/root, and must
    not need a ``..`` segment to be reached from the base.
    """
    base = Path(base_dir).resolve()
    target = Path(target_path).resolve()
    context = {"base_dir": str(base)}

    if target == base:
        return Err(
            PathSecurityError(
                "Target path cannot be exactly the base directory", str(target_path), context
            )
        )

    if base.anchor != target.anchor:
        return Err(
            PathSecurityError("Cross-drive path access detected", str(target_path), context)
        )

    try:
        rel = os.path.relpath(target, base)
    except ValueError:
        return Err(
            PathSecurityError("Cross-drive path access detected", str(target_path), context)
        )

    if os.path.isabs(rel):
        return Err(
            PathSecurityError("Cross-drive path access detected", str(target_path), context)
        )

    if rel == os.pardir or rel.startswith(os.pardir + os.sep):
        return Err(
            PathSecurityError(
                f'Path "{target_path}" is outside of "{base_dir}"',
                str(target_path),
                {**context, "relative_path": rel},
            )
        )

    return OK_NONE


# ---------------------------------------------------------------------------
# LocalFileSystem
# ---------------------------------------------------------------------------


def _describe(exc: BaseException) -> str:
    return getattr(exc, "strerror", None) or str(exc) or type(exc).__name__


class LocalFileSystem:
    """Async filesystem port.

    Blocking calls run in a worker thread (``asyncio.to_thread``) so the
    event loop stays responsive while the pipeline writes files.
    """

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self.base_dir = Path(base_dir).resolve() if base_dir is not None else None

    def _check(self, path: str | Path) -> Result[None, PathSecurityError]:
        if self.base_dir is None:
            return OK_NONE
        return assert_within(self.base_dir, path)

    async def read_file(self, path: str | Path) -> Result[str, FileSystemError]:
        """Read a UTF-8 text file.

        Args:
            path: File to read.

        Returns:
            The file contents, or ``FileSystemError`` when the file is
            missing, unreadable or not valid UTF-8.
        """
        try:
            content = await asyncio.to_thread(_read_text, Path(path))
        except (OSError, UnicodeError) as exc:
            return Err(FileSystemError(f"Failed to read file: {_describe(exc)}", str(path)))
        return Ok(content)

    async def read_bytes(self, path: str | Path) -> Result[bytes, FileSystemError]:
        """Read a file as raw bytes.

        Args:
            path: File to read.

        Returns:
            The file contents, or ``FileSystemError`` on any OS error.
        """
        try:
            content = await asyncio.to_thread(Path(path).read_bytes)
        except OSError as exc:
            return Err(FileSystemError(f"Failed to read file: {_describe(exc)}", str(path)))
        return Ok(content)

    async def write_file(
        self, path: str | Path, content: str
    ) -> Result[None, FileSystemError | PathSecurityError]:
        """Write *content* as UTF-8, replacing any existing file.

        Args:
            path: Destination file. Its parent directory must exist.
            content: Text to write.

        Returns:
            ``Ok(None)`` on success, ``PathSecurityError`` when *path* falls
            outside ``base_dir``, or ``FileSystemError`` on any OS error.
        """
        check = self._check(path)
        if check.is_err():
            return check
        try:
            await asyncio.to_thread(_write_text, Path(path), content)
        except OSError as exc:
            return Err(FileSystemError(f"Failed to write file: {_describe(exc)}", str(path)))
        return OK_NONE

    async def mkdir(
        self, path: str | Path, recursive: bool = True
    ) -> Result[None, FileSystemError]:
        """Create a directory.

        Args:
            path: Directory to create.
            recursive: Create missing parents and tolerate an existing
                directory. With ``False`` the parent must exist and the
                directory must not, mirroring a plain ``mkdir``.

        Returns:
            ``Ok(None)`` on success, or ``FileSystemError`` on any OS error.
        """
        try:
            await asyncio.to_thread(
                Path(path).mkdir, parents=recursive, exist_ok=recursive
            )
        except OSError as exc:
            return Err(
                FileSystemError(f"Failed to create directory: {_describe(exc)}", str(path))
            )
        return OK_NONE

    def exists(self, path: str | Path) -> bool:
        """Return True when *path* names an existing file or directory."""
        return Path(path).exists()

    async def is_directory(self, path: str | Path) -> Result[bool, FileSystemError]:
        """Check whether *path* is a directory, following symlinks.

        Args:
            path: Path to inspect.

        Returns:
            ``Ok(True)`` for a directory, ``Ok(False)`` for any other existing
            entry, or ``FileSystemError`` when *path* cannot be stat'ed.
        """
        try:
            stat_result = await asyncio.to_thread(os.stat, path)
        except OSError as exc:
            return Err(
                FileSystemError(f"Failed to check directory: {_describe(exc)}", str(path))
            )
        return Ok(stat.S_ISDIR(stat_result.st_mode))

    async def read_dir(self, path: str | Path) -> Result[list[str], FileSystemError]:
        """List the entry names of a directory.

        Args:
            path: Directory to list.

        Returns:
            Entry names (not paths) in sorted order, or ``FileSystemError``
            when *path* is missing or not a directory.
        """
        try:
            entries = await asyncio.to_thread(os.listdir, path)
        except OSError as exc:
            return Err(
                FileSystemError(f"Failed to read directory: {_describe(exc)}", str(path))
            )
        return Ok(sorted(entries))

    async def copy_file(
        self, src: str | Path, dest: str | Path
    ) -> Result[None, FileSystemError | PathSecurityError]:
        """Copy the contents of *src* to *dest*, replacing *dest*.

        Args:
            src: Existing file to copy.
            dest: Destination file. Its parent directory must exist.

        Returns:
            ``Ok(None)`` on success, ``PathSecurityError`` when either path
            falls outside ``base_dir``, or ``FileSystemError`` on any OS error.
        """
        for candidate in (src, dest):
            check = self._check(candidate)
            if check.is_err():
                return check
        try:
            await asyncio.to_thread(shutil.copyfile, src, dest)
        except OSError as exc:
            return Err(FileSystemError(f"Failed to copy file: {_describe(exc)}", str(src)))
        return OK_NONE


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _read_text(path: Path) -> str:
    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


def _write_text(path: Path, content: str) -> None:
    # newline="" keeps content byte-identical on every platform.
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(content)
