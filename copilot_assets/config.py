"""User configuration — the remote template source.

Stored as YAML in ``~/.config/copilot-assets/config.yaml``. Set
``COPILOT_ASSETS_CONFIG_DIR`` to use another directory.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from copilot_assets.security.paths import is_valid_branch, is_valid_repository

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "COPILOT_ASSETS_CONFIG_DIR"
CONFIG_FILENAME = "config.yaml"
DEFAULT_BRANCH = "main"


def config_dir() -> Path:
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return Path.home() / ".config" / "copilot-assets"


def config_path() -> Path:
    return config_dir() / CONFIG_FILENAME


@dataclass
class RemoteConfig:
    """Remote template source. ``source=None`` means bundled templates only."""

    source: str | None = None
    branch: str = DEFAULT_BRANCH

    @property
    def has_remote_source(self) -> bool:
        return bool(self.source and self.source.strip())

    @classmethod
    def load(cls, path: str | Path | None = None) -> RemoteConfig:
        """Load the configuration; a missing or unreadable file yields the default."""
        path = Path(path) if path else config_path()
        if not path.exists():
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
            return cls()

        if not isinstance(data, dict):
            return cls()
        return cls(
            source=data.get("source") or None,
            branch=data.get("branch") or DEFAULT_BRANCH,
        )

    def save(self, path: str | Path | None = None) -> Path:
        path = Path(path) if path else config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump({"source": self.source, "branch": self.branch}, f, sort_keys=False)
        return path

    @staticmethod
    def reset(path: str | Path | None = None) -> bool:
        """Delete the configuration file. Returns True if one existed."""
        path = Path(path) if path else config_path()
        if path.exists():
            path.unlink()
            return True
        return False

    @staticmethod
    def is_valid_source(source: str) -> bool:
        return is_valid_repository(source)

    @staticmethod
    def is_valid_branch(branch: str) -> bool:
        return is_valid_branch(branch)


def parse_source_option(value: str | None) -> tuple[str, str] | None:
    """Parse ``owner/repo[@branch]``; ``None`` for the bundled source.

    ``default``, ``bundled`` and empty values select the bundled templates.
    """
    if not value or value.strip().lower() in ("default", "bundled"):
        return None
    repo, _, branch = value.strip().partition("@")
    return repo, branch or DEFAULT_BRANCH
