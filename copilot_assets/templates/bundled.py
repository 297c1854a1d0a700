"""Templates shipped with the package."""

from __future__ import annotations

import logging
from pathlib import Path

from copilot_assets.models.manifest import TemplateSource
from copilot_assets.templates.base import TemplateFile, TemplateProvider, TemplateResult
from copilot_assets.utils.file_scanner import scan_template_files, to_relative_posix

logger = logging.getLogger(__name__)

BUNDLED_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "bundled_templates"


class BundledTemplateProvider(TemplateProvider):
    """Reads every template under a local directory (the bundled set by default)."""

    def __init__(self, templates_dir: str | Path | None = None):
        self.templates_dir = Path(templates_dir) if templates_dir else BUNDLED_TEMPLATES_DIR

    def fetch(self) -> TemplateResult:
        source = TemplateSource.default()
        if not self.templates_dir.is_dir():
            return TemplateResult.failed(
                source, f"Templates directory not found: {self.templates_dir}"
            )

        templates = [
            TemplateFile(
                relative_path=to_relative_posix(path, self.templates_dir),
                content=path.read_text(encoding="utf-8"),
            )
            for path in scan_template_files(self.templates_dir)
        ]
        logger.debug("Loaded %d bundled template(s) from %s", len(templates), self.templates_dir)
        return TemplateResult(templates=templates, source=source)

    def is_available(self) -> bool:
        return self.templates_dir.is_dir()
