"""Manifest — the persisted record of installed assets and their checksums.

The manifest lives at ``.github/.copilot-assets.json`` inside the target
project and is rewritten wholesale by every successful sync. Tracking paths
are either plain paths relative to ``.github`` or ``<tool>:<path>`` for files
that another target tool keeps outside ``.github``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone

HOME_DIR = ".github"
MANIFEST_FILENAME = ".copilot-assets.json"
MANIFEST_RELATIVE_PATH = f"{HOME_DIR}/{MANIFEST_FILENAME}"
SCHEMA_VERSION = 1


@dataclass
class TemplateSource:
    """Where a set of templates came from."""

    type: str = "default"  # default | remote
    repo: str | None = None
    branch: str | None = None

    @classmethod
    def default(cls) -> TemplateSource:
        return cls()

    @classmethod
    def remote(cls, repo: str, branch: str = "main") -> TemplateSource:
        return cls(type="remote", repo=repo, branch=branch)

    @classmethod
    def parse(cls, value: str | None) -> TemplateSource:
        """Parse a descriptor such as ``remote:owner/repo@main``.

        Anything that is not a ``remote:`` descriptor is the default source.
        """
        if not value or not value.startswith("remote:"):
            return cls.default()

        rest = value[len("remote:"):]
        repo, sep, branch = rest.partition("@")
        if sep and repo:
            return cls.remote(repo, branch)
        return cls(type="remote", repo=rest)

    @property
    def descriptor(self) -> str:
        if self.type != "remote":
            return "default"
        if self.branch:
            return f"remote:{self.repo}@{self.branch}"
        return f"remote:{self.repo}"

    def to_dict(self) -> dict:
        data: dict = {"type": self.type}
        if self.repo is not None:
            data["repo"] = self.repo
        if self.branch is not None:
            data["branch"] = self.branch
        return data

    @classmethod
    def from_dict(cls, data: dict | None) -> TemplateSource:
        if not data:
            return cls.default()
        return cls(
            type=data.get("type", "default"),
            repo=data.get("repo"),
            branch=data.get("branch"),
        )

    def __str__(self) -> str:
        if self.type == "default":
            return "default templates"
        if self.repo and self.branch:
            return f"remote: {self.repo}@{self.branch}"
        if self.repo:
            return f"remote: {self.repo}"
        return self.type


@dataclass
class Manifest:
    """Installed assets, their checksums and how they were produced."""

    tool_version: str
    installed_at: str = ""
    schema_version: int = SCHEMA_VERSION
    targets: list[str] = field(default_factory=list)
    source: TemplateSource = field(default_factory=TemplateSource)
    assets: list[str] = field(default_factory=list)
    checksums: dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        tool_version: str,
        source: TemplateSource | None = None,
        targets: list[str] | None = None,
    ) -> Manifest:
        """Seed a new manifest stamped with the current UTC time."""
        return cls(
            tool_version=tool_version,
            installed_at=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            source=source or TemplateSource.default(),
            targets=list(targets or []),
        )

    def track(self, tracking_path: str, checksum: str | None) -> None:
        """Record an asset; a ``None`` checksum tracks the path without one."""
        if tracking_path not in self.assets:
            self.assets.append(tracking_path)
        if checksum is not None:
            self.checksums[tracking_path] = checksum

    def to_dict(self) -> dict:
        return {
            "schemaVersion": self.schema_version,
            "installedAt": self.installed_at,
            "toolVersion": self.tool_version,
            "targets": list(self.targets),
            "source": self.source.to_dict(),
            "assets": list(self.assets),
            "checksums": dict(self.checksums),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2) + "\n"

    @classmethod
    def from_dict(cls, data: dict) -> Manifest:
        """Build a manifest from its JSON form.

        Raises:
            ValueError: a field has the wrong shape (assets, targets and
                checksums must hold strings only).
        """
        assets = _string_list(data.get("assets"), "assets")
        targets = _string_list(data.get("targets"), "targets")
        checksums = data.get("checksums") or {}
        if not isinstance(checksums, dict):
            raise ValueError("'checksums' must be an object")
        for key, value in checksums.items():
            if not isinstance(value, str):
                raise ValueError(f"Checksum for '{key}' must be a string")
        source = data.get("source")
        if source is not None and not isinstance(source, dict):
            raise ValueError("'source' must be an object")

        return cls(
            schema_version=int(data.get("schemaVersion", SCHEMA_VERSION)),
            installed_at=data.get("installedAt", ""),
            tool_version=data.get("toolVersion", ""),
            targets=targets,
            source=TemplateSource.from_dict(source),
            assets=assets,
            checksums=dict(checksums),
        )

    @classmethod
    def from_json(cls, text: str) -> Manifest:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Manifest root must be a JSON object")
        return cls.from_dict(data)


def _string_list(value, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"'{field_name}' must be a list")
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"'{field_name}' must contain only strings, got {item!r}")
    return list(value)
