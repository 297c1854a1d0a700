"""File scanner — discover template files under a directory."""

from __future__ import annotations

import logging
from pathlib import Path

from copilot_assets.security.limits import ContentLimits

logger = logging.getLogger(__name__)

# Directories to always skip
SKIP_DIRS = {
    ".git", "__pycache__", "node_modules", ".venv", "venv",
    ".mypy_cache", ".pytest_cache", ".ruff_cache",
}


def scan_template_files(root: Path) -> list[Path]:
    """Recursively list template files under *root*, sorted by relative path.

    Files in skipped directories, with a disallowed extension, or above the
    size limit are left out.
    """
    files = []
    for item in root.rglob("*"):
        if item.is_file() and _should_include(item.relative_to(root)):
            if item.stat().st_size > ContentLimits.MAX_FILE_SIZE:
                logger.warning("Skipping oversized template %s", item)
                continue
            files.append(item)
    return sorted(files, key=lambda p: p.relative_to(root).as_posix())


def to_relative_posix(path: Path, root: Path) -> str:
    return path.relative_to(root).as_posix()


def _should_include(relative: Path) -> bool:
    for part in relative.parts[:-1]:
        if part in SKIP_DIRS:
            return False
    return ContentLimits.is_allowed_extension(relative.name)
