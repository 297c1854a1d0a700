"""Sync engine — render templates, decide per file, write, record the manifest.

For every template, in source order:

1. Excluded by the asset filter → skipped.
2. Rendered once per target tool (or copied as is into ``.github`` when no
   targets are requested).
3. Target absent, or ``force`` → written.
4. Target present and identical → unchanged; present and different →
   skipped with a warning. Local edits are never overwritten without force.

A fresh manifest of the written and unchanged files then replaces the old
one. ``preview_sync`` makes the same decisions and reports them as planned
operations without touching the filesystem.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from copilot_assets import __version__
from copilot_assets.adapters.base import AssetMetadata
from copilot_assets.adapters.registry import DEFAULT_REGISTRY, AdapterRegistry
from copilot_assets.models.assets import AssetCategory, AssetTypeFilter, TargetTool
from copilot_assets.models.manifest import HOME_DIR, MANIFEST_FILENAME, Manifest
from copilot_assets.models.results import (
    AssetInfo,
    AssetListResult,
    DryRunResult,
    OperationType,
    PlannedOperation,
    SyncedAsset,
    SyncResult,
    UpdateCheckResult,
)
from copilot_assets.security.manifest_validator import check_asset_count
from copilot_assets.security.paths import (
    check_tracking_path,
    make_tracking_path,
    resolve_in_project,
)
from copilot_assets.sync.manifest_store import ManifestStore
from copilot_assets.templates.base import TemplateFile, TemplateProvider, TemplateResult
from copilot_assets.utils.checksum import checksum_file, checksum_text

logger = logging.getLogger(__name__)

CONFLICT_HINT = "local file differs from template (use --force to overwrite)"


@dataclass
class RenderedAsset:
    """One template rendered for one target tool."""

    template_path: str
    category: AssetCategory
    target: TargetTool | None
    output_path: str  # relative to the project root
    tracking_path: str
    content: str


@dataclass
class RenderPlan:
    assets: list[RenderedAsset] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)
    collisions: list[RenderedAsset] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def write_asset(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


def asset_category(registry: AdapterRegistry, tracking_path: str) -> AssetCategory:
    """Category of a tracked asset, recovered from its output location."""
    adapter, output_path = registry.for_tracking_path(tracking_path)
    return adapter.classify(output_path)


class SyncEngine:
    """Installs templates from one provider into target projects."""

    def __init__(
        self,
        provider: TemplateProvider,
        registry: AdapterRegistry = DEFAULT_REGISTRY,
        tool_version: str = __version__,
    ):
        self.provider = provider
        self.registry = registry
        self.tool_version = tool_version

    # ── Rendering ────────────────────────────────────────────────────

    def fetch(self) -> TemplateResult:
        result = self.provider.fetch()
        if not result.has_error and not result.has_templates:
            result.error = "No templates found"
        return result

    def render(
        self,
        templates: Iterable[TemplateFile],
        asset_filter: AssetTypeFilter | None = None,
        targets: Iterable[TargetTool] | None = None,
    ) -> RenderPlan:
        """Map templates onto output paths and content, without any I/O.

        Raises:
            SecurityViolation: a template maps outside its allowed directory.
        """
        adapters = self.registry.for_targets(targets or [])
        plan = RenderPlan()
        claimed: dict[str, str] = {}

        for template in templates:
            category = template.category
            if asset_filter is not None and not asset_filter.includes(category):
                logger.debug("Excluded by filter: %s (%s)", template.relative_path, category.value)
                plan.excluded.append(template.relative_path)
                continue

            for asset in self._render_one(template, category, adapters):
                check_tracking_path(asset.tracking_path)

                first = claimed.get(asset.output_path)
                if first is not None:
                    plan.collisions.append(asset)
                    plan.warnings.append(
                        f"Skipped {asset.template_path}: {asset.output_path} "
                        f"is already produced by {first}"
                    )
                    continue
                claimed[asset.output_path] = asset.template_path
                plan.assets.append(asset)

        return plan

    def _render_one(self, template, category, adapters) -> list[RenderedAsset]:
        if not adapters:
            return [
                RenderedAsset(
                    template_path=template.relative_path,
                    category=category,
                    target=None,
                    output_path=f"{HOME_DIR}/{template.relative_path}",
                    tracking_path=template.relative_path,
                    content=template.content,
                )
            ]

        metadata = AssetMetadata.for_path(template.relative_path)
        rendered = []
        for adapter in adapters:
            output_path = adapter.output_path(category, template.relative_path)
            rendered.append(
                RenderedAsset(
                    template_path=template.relative_path,
                    category=category,
                    target=adapter.target,
                    output_path=output_path,
                    tracking_path=make_tracking_path(adapter.target, output_path),
                    content=adapter.transform_content(template.content, metadata),
                )
            )
        return rendered

    # ── Sync ─────────────────────────────────────────────────────────

    def sync(
        self,
        target_dir: str | Path,
        force: bool = False,
        asset_filter: AssetTypeFilter | None = None,
        targets: list[TargetTool] | None = None,
        cancel: threading.Event | None = None,
    ) -> SyncResult:
        """Install the provider's templates into *target_dir*.

        Raises:
            SecurityViolation: before any write, when the rendered assets
                exceed the manifest limit or a path escapes its directory.
        """
        target_dir = Path(target_dir)
        fetched = self.fetch()
        result = SyncResult(source=fetched.source)

        if fetched.has_error:
            result.errors.append(fetched.error)
            return result

        plan = self.render(fetched.templates, asset_filter, targets)
        check_asset_count(len(plan.assets))
        result.skipped.extend(plan.excluded)
        result.skipped.extend(a.tracking_path for a in plan.collisions)
        result.warnings.extend(plan.warnings)

        manifest = Manifest.create(
            self.tool_version,
            source=fetched.source,
            targets=[t.value for t in targets or []],
        )

        for asset in plan.assets:
            if cancel is not None and cancel.is_set():
                logger.info("Sync cancelled before %s", asset.tracking_path)
                result.errors.append("Sync cancelled")
                return result

            path = resolve_in_project(target_dir, asset.tracking_path)
            existed = path.exists()

            if existed and not force:
                if checksum_file(path) == checksum_text(asset.content):
                    logger.debug("Unchanged: %s", asset.tracking_path)
                    result.unchanged.append(asset.tracking_path)
                    manifest.track(asset.tracking_path, checksum_file(path))
                else:
                    logger.debug("Conflict, not overwriting: %s", asset.tracking_path)
                    result.skipped.append(asset.tracking_path)
                    result.warnings.append(f"Skipped {asset.tracking_path}: {CONFLICT_HINT}")
                continue

            write_asset(path, asset.content)
            checksum = checksum_file(path)
            logger.debug("%s: %s", "Updated" if existed else "Created", asset.tracking_path)
            result.synced.append(
                SyncedAsset(
                    relative_path=asset.tracking_path,
                    full_path=str(path),
                    checksum=checksum,
                    was_updated=existed,
                )
            )
            manifest.track(asset.tracking_path, checksum)

        store = ManifestStore(target_dir)
        manifest_existed = store.exists()
        manifest_path = store.write(manifest)
        # The manifest is reported as synced but never checksums itself.
        result.synced.append(
            SyncedAsset(
                relative_path=MANIFEST_FILENAME,
                full_path=str(manifest_path),
                checksum=checksum_file(manifest_path),
                was_updated=manifest_existed,
            )
        )
        return result

    def preview_sync(
        self,
        target_dir: str | Path,
        force: bool = False,
        asset_filter: AssetTypeFilter | None = None,
        targets: list[TargetTool] | None = None,
    ) -> DryRunResult:
        """What :meth:`sync` would do, as planned operations. Writes nothing."""
        target_dir = Path(target_dir)
        fetched = self.fetch()
        result = DryRunResult()

        if fetched.has_error:
            result.errors.append(fetched.error)
            return result

        plan = self.render(fetched.templates, asset_filter, targets)
        check_asset_count(len(plan.assets))
        result.warnings.extend(plan.warnings)
        for path in plan.excluded:
            result.operations.append(
                PlannedOperation(OperationType.SKIP, path, "excluded by filter")
            )
        for asset in plan.collisions:
            result.operations.append(
                PlannedOperation(OperationType.SKIP, asset.tracking_path, "output collision")
            )

        for asset in plan.assets:
            path = resolve_in_project(target_dir, asset.tracking_path)
            if not path.exists():
                op = PlannedOperation(OperationType.CREATE, asset.tracking_path)
            elif force:
                same = checksum_file(path) == checksum_text(asset.content)
                reason = "forced rewrite" if same else "content differs"
                op = PlannedOperation(OperationType.UPDATE, asset.tracking_path, reason)
            elif checksum_file(path) == checksum_text(asset.content):
                op = PlannedOperation(OperationType.SKIP, asset.tracking_path, "unchanged")
            else:
                op = PlannedOperation(OperationType.SKIP, asset.tracking_path, CONFLICT_HINT)
            result.operations.append(op)

        store = ManifestStore(target_dir)
        if not store.exists():
            result.operations.append(PlannedOperation(OperationType.CREATE, MANIFEST_FILENAME))
        elif result.has_pending_changes:
            result.operations.append(
                PlannedOperation(OperationType.UPDATE, MANIFEST_FILENAME, "update manifest")
            )
        return result

    # ── Inspection ───────────────────────────────────────────────────

    def read_manifest(self, target_dir: str | Path) -> Manifest | None:
        return ManifestStore(target_dir).read()

    def manifest_targets(self, manifest: Manifest) -> list[TargetTool]:
        return [TargetTool.from_name(t) for t in manifest.targets]

    def check_for_updates(
        self,
        target_dir: str | Path,
        asset_filter: AssetTypeFilter | None = None,
    ) -> UpdateCheckResult:
        """Compare freshly rendered templates with the installed manifest."""
        manifest = self.read_manifest(target_dir)
        if manifest is None:
            return UpdateCheckResult(not_installed=True)

        fetched = self.fetch()
        if fetched.has_error:
            return UpdateCheckResult(error=fetched.error)

        plan = self.render(fetched.templates, asset_filter, self.manifest_targets(manifest))
        result = UpdateCheckResult()
        rendered: set[str] = set()

        for asset in plan.assets:
            rendered.add(asset.tracking_path)
            installed = manifest.checksums.get(asset.tracking_path)
            if asset.tracking_path not in manifest.assets:
                result.added.append(asset.tracking_path)
            elif installed is not None and installed != checksum_text(asset.content):
                result.modified.append(asset.tracking_path)
            else:
                result.unchanged.append(asset.tracking_path)

        for tracking_path in manifest.assets:
            if tracking_path in rendered or PurePosixPath(tracking_path).name == MANIFEST_FILENAME:
                continue
            category = asset_category(self.registry, tracking_path)
            if asset_filter is not None and not asset_filter.includes(category):
                continue
            result.removed.append(tracking_path)

        return result

    def list_assets(
        self,
        target_dir: str | Path,
        asset_filter: AssetTypeFilter | None = None,
    ) -> AssetListResult | None:
        """Tracked assets and whether each still matches its checksum.

        Returns None when the project has no manifest.
        """
        target_dir = Path(target_dir)
        manifest = self.read_manifest(target_dir)
        if manifest is None:
            return None

        result = AssetListResult(project_path=str(target_dir), source=manifest.source)
        for tracking_path in manifest.assets:
            if PurePosixPath(tracking_path).name == MANIFEST_FILENAME:
                continue
            category = asset_category(self.registry, tracking_path)
            if asset_filter is not None and not asset_filter.includes(category):
                continue

            expected = manifest.checksums.get(tracking_path)
            path = resolve_in_project(target_dir, tracking_path)
            info = AssetInfo(
                type=category.value,
                name=PurePosixPath(tracking_path).name,
                path=tracking_path,
                valid=True,
                checksum=expected,
            )
            if not path.is_file():
                info.valid, info.reason = False, "missing"
            elif expected is not None and checksum_file(path) != expected:
                info.valid, info.reason = False, "modified"
            result.assets.append(info)

        return result
