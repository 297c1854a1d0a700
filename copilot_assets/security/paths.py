"""Input validation and tracking-path resolution.

Tracking paths come in two forms:

- ``prompts/review.prompt.md`` — plain, rooted at the ``.github`` home directory
- ``claude:CLAUDE.md`` — multi-target, ``<tool>:<path relative to project root>``

Only a known target-tool prefix makes a path multi-target; any other
colon-containing string is a plain path.
"""

from __future__ import annotations

import posixpath
import re
from pathlib import Path

from copilot_assets.errors import SecurityViolation
from copilot_assets.models.assets import PRIMARY_TARGET, TargetTool
from copilot_assets.models.manifest import HOME_DIR

MAX_REPOSITORY_LENGTH = 200
MAX_COMPONENT_LENGTH = 100
MAX_BRANCH_LENGTH = 255

_REPOSITORY_RE = re.compile(r"^[a-zA-Z0-9_.-]+/[a-zA-Z0-9_.-]+$")


# --- Input validation ---


def is_valid_repository(source: str | None) -> bool:
    """Validate an ``owner/repo`` string."""
    if not source or not source.strip() or len(source) > MAX_REPOSITORY_LENGTH:
        return False

    parts = source.split("/")
    if len(parts) != 2:
        return False
    for part in parts:
        if not part.strip() or len(part) > MAX_COMPONENT_LENGTH:
            return False
        if ".." in part or "\\" in part:
            return False

    return bool(_REPOSITORY_RE.match(source))


def is_valid_branch(branch: str | None) -> bool:
    if not branch or not branch.strip() or len(branch) > MAX_BRANCH_LENGTH:
        return False
    if ".." in branch or "/" in branch or "\\" in branch:
        return False
    if branch.lower().startswith("refs/") or branch.upper() == "HEAD":
        return False
    return True


def sanitize_path(path: str) -> str:
    """Reject empty, absolute, traversing or backslash paths from a remote source."""
    if not path or not path.strip():
        raise SecurityViolation("Path cannot be empty")

    trimmed = path.strip()
    if trimmed.startswith(("/", "\\")) or re.match(r"^[a-zA-Z]:", trimmed):
        raise SecurityViolation(f"Absolute paths not allowed: {path}")
    if "\\" in trimmed:
        raise SecurityViolation(f"Invalid path separator: {path}")
    if ".." in trimmed.split("/"):
        raise SecurityViolation(f"Path traversal detected: {path}")

    return trimmed


# --- Tracking paths ---


def is_multi_target_path(tracking_path: str) -> bool:
    prefix, sep, _ = tracking_path.partition(":")
    return bool(sep and prefix and TargetTool.is_known(prefix))


def split_tracking_path(tracking_path: str) -> tuple[TargetTool, str]:
    """Return the owning tool and the path after any tool prefix."""
    if is_multi_target_path(tracking_path):
        prefix, _, rest = tracking_path.partition(":")
        return TargetTool.from_name(prefix), rest
    return PRIMARY_TARGET, tracking_path


def make_tracking_path(tool: TargetTool, output_path: str) -> str:
    """Build the manifest key for a file written at *output_path*.

    The primary tool's files inside the home directory stay plain; every
    other write is prefixed with its tool.
    """
    home_prefix = f"{HOME_DIR}/"
    if tool == PRIMARY_TARGET and output_path.startswith(home_prefix):
        return output_path[len(home_prefix):]
    return f"{tool.value}:{output_path}"


def resolve_tracking_path(tracking_path: str) -> str:
    """Map a tracking path to a path relative to the project root."""
    if is_multi_target_path(tracking_path):
        return tracking_path.partition(":")[2]
    return f"{HOME_DIR}/{tracking_path}"


def check_tracking_path(tracking_path: str) -> str:
    """Validate a tracking path and return its project-relative form.

    Plain paths must stay inside the home directory after normalization;
    multi-target paths must stay inside the project root.
    """
    if is_multi_target_path(tracking_path):
        relative = sanitize_path(tracking_path.partition(":")[2])
        normalized = posixpath.normpath(relative)
        if normalized == ".." or normalized.startswith("../"):
            raise SecurityViolation(f"Tracking path escapes the project: {tracking_path}")
        return normalized

    sanitize_path(tracking_path)
    normalized = posixpath.normpath(f"{HOME_DIR}/{tracking_path}")
    if not normalized.startswith(f"{HOME_DIR}/"):
        raise SecurityViolation(
            f"Tracking path escapes the {HOME_DIR} directory: {tracking_path}"
        )
    return normalized


def resolve_in_project(project_dir: str | Path, tracking_path: str) -> Path:
    """Validated filesystem location of a tracked asset."""
    return Path(project_dir) / check_tracking_path(tracking_path)
