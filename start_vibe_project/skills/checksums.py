"""SHA-256 fingerprints of installed skill files.

The manifest (``.checksums.json`` at the root of the skills directory) maps
each file's POSIX path, relative to that root, to its digest.  It is written
on first install and only compared afterwards.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path, PurePath

from ..errors import error_message
from ..ports import FileSystemPort, LoggerPort

MANIFEST_FILE = ".checksums.json"


@dataclass
class ChecksumReport:
    """Outcome of a verification pass."""

    checksums: dict[str, str] = field(default_factory=dict)
    manifest_created: bool = False
    mismatches: list[str] = field(default_factory=list)
    skipped: bool = False


async def _walk(fs: FileSystemPort, root: Path, directory: Path) -> list[Path]:
    listing = await fs.read_dir(directory)
    if listing.is_err():
        return []

    files: list[Path] = []
    for entry in listing.value:
        entry_path = directory / entry
        is_dir = await fs.is_directory(entry_path)
        if is_dir.is_ok() and is_dir.value:
            files.extend(await _walk(fs, root, entry_path))
        elif entry_path != root / MANIFEST_FILE:
            files.append(entry_path)
    return files


async def collect_checksums(fs: FileSystemPort, skills_root: str | Path) -> dict[str, str]:
    """Hash every file under *skills_root*, sorted by relative path."""
    root = Path(skills_root)
    checksums: dict[str, str] = {}

    for file_path in await _walk(fs, root, root):
        content = await fs.read_bytes(file_path)
        if content.is_err():
            continue
        relative = PurePath(file_path.relative_to(root)).as_posix()
        checksums[relative] = hashlib.sha256(content.value).hexdigest()

    return dict(sorted(checksums.items()))


def find_mismatches(expected: dict[str, str], actual: dict[str, str]) -> list[str]:
    """Paths missing on either side or whose digests differ."""
    return sorted(
        key for key in set(expected) | set(actual) if expected.get(key) != actual.get(key)
    )


def render_manifest(checksums: dict[str, str]) -> str:
    payload = {
        "checksums": checksums,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    return json.dumps(payload, indent=2) + "\n"


async def verify_checksums(
    fs: FileSystemPort, logger: LoggerPort, skills_root: str | Path
) -> ChecksumReport:
    """Record a baseline manifest or compare against the existing one.

    Drift is advisory: mismatches are logged as warnings and returned in the
    report, never raised.
    """
    root = Path(skills_root)
    if not fs.exists(root):
        logger.warn(
            "Skills directory not found for checksum verification",
            {"skills_root": str(root)},
        )
        return ChecksumReport(skipped=True)

    manifest_path = root / MANIFEST_FILE
    current = await collect_checksums(fs, root)
    report = ChecksumReport(checksums=current)

    if not fs.exists(manifest_path):
        written = await fs.write_file(manifest_path, render_manifest(current))
        if written.is_err():
            logger.error(
                "Failed to write checksum file", {"error": error_message(written.error)}
            )
        else:
            report.manifest_created = True
        return report

    existing = await fs.read_file(manifest_path)
    if existing.is_err():
        logger.warn("Failed to read checksum file", {"error": error_message(existing.error)})
        return report

    try:
        expected = json.loads(existing.value).get("checksums")
    except (json.JSONDecodeError, AttributeError):
        logger.warn("Invalid checksum file format", {"path": str(manifest_path)})
        return report

    if not isinstance(expected, dict):
        logger.warn("Invalid checksum file format", {"path": str(manifest_path)})
        return report

    report.mismatches = find_mismatches(expected, current)
    if report.mismatches:
        logger.warn("Skill checksum mismatch", {"mismatches": report.mismatches})
    return report
