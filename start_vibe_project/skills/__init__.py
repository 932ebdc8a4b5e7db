"""Skill installation: registry loading, tag-based planning, the installer
state machine, and checksum fingerprints of installed files.

Key classes:
    SkillInstaller  - Drives ``npx skills add`` once per planned source
    ChecksumReport  - Outcome of recording or comparing the checksum manifest
"""

from .checksums import ChecksumReport, collect_checksums, verify_checksums
from .installer import InstallerState, SkillInstaller
from .planner import build_install_plan, select_tags
from .registry import load_registry, parse_registry

__all__ = [
    # Installer
    "SkillInstaller",
    "InstallerState",
    # Planning
    "build_install_plan",
    "select_tags",
    # Registry
    "load_registry",
    "parse_registry",
    # Checksums
    "ChecksumReport",
    "collect_checksums",
    "verify_checksums",
]
