"""Read and write the manifest file inside a target project."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from copilot_assets.errors import ManifestFormatError, SecurityViolation
from copilot_assets.models.manifest import MANIFEST_RELATIVE_PATH, Manifest
from copilot_assets.security.limits import ContentLimits
from copilot_assets.security.manifest_validator import validate_manifest

logger = logging.getLogger(__name__)


class ManifestStore:
    """The manifest of one project, at ``<project>/.github/.copilot-assets.json``."""

    def __init__(self, project_dir: str | Path):
        self.project_dir = Path(project_dir)
        self.path = self.project_dir / MANIFEST_RELATIVE_PATH

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Manifest | None:
        """Load and validate the manifest. Returns None when there is none.

        Raises:
            SecurityViolation: oversized manifest, bad checksum or escaping path.
            ManifestFormatError: the file is not a JSON manifest.
        """
        if not self.exists():
            return None

        size = self.path.stat().st_size
        if size > ContentLimits.MAX_MANIFEST_SIZE:
            raise SecurityViolation(
                f"Manifest exceeds maximum size ({size} > {ContentLimits.MAX_MANIFEST_SIZE} bytes)"
            )

        try:
            manifest = Manifest.from_json(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            raise ManifestFormatError(f"Invalid manifest {MANIFEST_RELATIVE_PATH}: {e}") from e

        validate_manifest(manifest)
        return manifest

    def write(self, manifest: Manifest) -> Path:
        """Validate and write the manifest in one rename.

        The JSON goes to a temporary file in the same directory which then
        replaces the manifest, so readers see either the old or the new one.
        """
        validate_manifest(manifest)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=".copilot-assets.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(manifest.to_json())
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info("Wrote manifest with %d asset(s) to %s", len(manifest.assets), self.path)
        return self.path
