"""Verify — re-derive drift between the manifest and the files on disk."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from copilot_assets.adapters.registry import DEFAULT_REGISTRY, AdapterRegistry
from copilot_assets.models.assets import AssetTypeFilter
from copilot_assets.models.manifest import MANIFEST_FILENAME, Manifest
from copilot_assets.models.results import VerifyAssetResult, VerifyResult, VerifyStatus
from copilot_assets.security.paths import resolve_in_project
from copilot_assets.sync.engine import SyncEngine, asset_category, write_asset
from copilot_assets.sync.manifest_store import ManifestStore
from copilot_assets.templates.base import TemplateProvider
from copilot_assets.utils.checksum import checksum_file

logger = logging.getLogger(__name__)


class Verifier:
    """Classifies every tracked asset as valid, modified or missing.

    With ``restore=True``, modified and missing assets are rewritten from
    the templates, rendered for the targets recorded in the manifest.
    """

    def __init__(self, provider: TemplateProvider, registry: AdapterRegistry = DEFAULT_REGISTRY):
        self.engine = SyncEngine(provider, registry)
        self.registry = registry
        self._originals: dict[str, str] | None = None

    def verify(
        self,
        target_dir: str | Path,
        restore: bool = False,
        asset_filter: AssetTypeFilter | None = None,
    ) -> VerifyResult:
        target_dir = Path(target_dir)
        manifest = ManifestStore(target_dir).read()
        if manifest is None:
            return VerifyResult.no_manifest()

        result = VerifyResult()
        self._originals = None

        for tracking_path in manifest.assets:
            name = PurePosixPath(tracking_path).name
            if name == MANIFEST_FILENAME:
                continue
            category = asset_category(self.registry, tracking_path)
            if asset_filter is not None and not asset_filter.includes(category):
                continue

            expected = manifest.checksums.get(tracking_path)
            path = resolve_in_project(target_dir, tracking_path)
            entry = VerifyAssetResult(
                tracking_path=tracking_path,
                status=VerifyStatus.VALID,
                type=category.value,
                name=name,
                expected_checksum=expected,
            )

            if not path.is_file():
                entry.status = VerifyStatus.MISSING
            else:
                entry.actual_checksum = checksum_file(path)
                if expected is not None and entry.actual_checksum != expected:
                    entry.status = VerifyStatus.MODIFIED

            if restore and entry.status != VerifyStatus.VALID:
                self._restore(entry, path, manifest, result)

            logger.debug("%s: %s", entry.status.value, tracking_path)
            result.assets.append(entry)

        return result

    def _restore(
        self,
        entry: VerifyAssetResult,
        path: Path,
        manifest: Manifest,
        result: VerifyResult,
    ) -> None:
        originals = self._load_originals(manifest, result)
        content = originals.get(entry.tracking_path)
        if content is None:
            result.errors.append(f"Cannot restore {entry.tracking_path}: no matching template")
            return

        write_asset(path, content)
        entry.actual_checksum = checksum_file(path)
        entry.status = VerifyStatus.RESTORED
        if entry.expected_checksum and entry.actual_checksum != entry.expected_checksum:
            result.warnings.append(
                f"Restored {entry.tracking_path} from current templates, "
                "which differ from the installed version"
            )

    def _load_originals(self, manifest: Manifest, result: VerifyResult) -> dict[str, str]:
        """Rendered content by tracking path, fetched once per verify."""
        if self._originals is not None:
            return self._originals

        self._originals = {}
        fetched = self.engine.fetch()
        if fetched.has_error:
            result.errors.append(f"Cannot restore: {fetched.error}")
            return self._originals

        plan = self.engine.render(fetched.templates, targets=self.engine.manifest_targets(manifest))
        self._originals = {a.tracking_path: a.content for a in plan.assets}
        return self._originals
