"""Result models for sync, dry-run, verify, validate and list operations.

Every model exposes ``to_dict()`` returning camelCase keys for JSON output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from copilot_assets.models.manifest import TemplateSource

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_PENDING_CHANGES = 2


# --- Sync ---


@dataclass
class SyncedAsset:
    """A file written during a sync."""

    relative_path: str  # tracking path
    full_path: str
    checksum: str
    was_updated: bool = False

    def to_dict(self) -> dict:
        return {
            "relativePath": self.relative_path,
            "fullPath": self.full_path,
            "checksum": self.checksum,
            "wasUpdated": self.was_updated,
        }


@dataclass
class SyncResult:
    """Outcome of a sync: what was written, left alone, or skipped."""

    synced: list[SyncedAsset] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    source: TemplateSource | None = None

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def total_processed(self) -> int:
        return len(self.synced) + len(self.unchanged) + len(self.skipped)

    @property
    def created_count(self) -> int:
        return sum(1 for s in self.synced if not s.was_updated)

    @property
    def updated_count(self) -> int:
        return sum(1 for s in self.synced if s.was_updated)

    def to_dict(self) -> dict:
        return {
            "synced": [s.to_dict() for s in self.synced],
            "unchanged": list(self.unchanged),
            "skipped": list(self.skipped),
            "source": self.source.to_dict() if self.source else None,
        }


@dataclass
class UpdateCheckResult:
    """Checksum comparison between rendered templates and the manifest."""

    added: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    not_installed: bool = False
    error: str | None = None

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.modified or self.removed)

    @property
    def success(self) -> bool:
        return self.error is None and not self.not_installed

    def to_dict(self) -> dict:
        return {
            "added": list(self.added),
            "modified": list(self.modified),
            "removed": list(self.removed),
            "unchanged": list(self.unchanged),
            "notInstalled": self.not_installed,
            "hasChanges": self.has_changes,
        }


# --- Dry run ---


class OperationType(Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SKIP = "skip"
    MODIFY = "modify"


@dataclass(frozen=True)
class PlannedOperation:
    """One step a sync would take. Planning never touches the filesystem."""

    type: OperationType
    path: str
    reason: str | None = None

    def to_dict(self) -> dict:
        data = {"type": self.type.value, "path": self.path}
        if self.reason:
            data["reason"] = self.reason
        return data


@dataclass
class DryRunResult:
    operations: list[PlannedOperation] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def count(self, op_type: OperationType) -> int:
        return sum(1 for o in self.operations if o.type == op_type)

    @property
    def has_pending_changes(self) -> bool:
        return any(
            self.count(t) > 0
            for t in (OperationType.CREATE, OperationType.UPDATE, OperationType.DELETE)
        )

    @property
    def exit_code(self) -> int:
        if self.errors:
            return EXIT_ERROR
        return EXIT_PENDING_CHANGES if self.has_pending_changes else EXIT_SUCCESS

    def summary(self) -> dict:
        return {
            "creates": self.count(OperationType.CREATE),
            "updates": self.count(OperationType.UPDATE),
            "deletes": self.count(OperationType.DELETE),
            "skips": self.count(OperationType.SKIP),
            "modifies": self.count(OperationType.MODIFY),
        }

    def to_dict(self) -> dict:
        return {
            "dryRun": True,
            "operations": [o.to_dict() for o in self.operations],
            "summary": self.summary(),
        }


# --- Verify ---


class VerifyStatus(Enum):
    VALID = "valid"
    MODIFIED = "modified"
    MISSING = "missing"
    RESTORED = "restored"


@dataclass
class VerifyAssetResult:
    tracking_path: str
    status: VerifyStatus
    type: str = ""
    name: str = ""
    expected_checksum: str | None = None
    actual_checksum: str | None = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "name": self.name,
            "path": self.tracking_path,
            "status": self.status.value,
            "expectedChecksum": self.expected_checksum,
            "actualChecksum": self.actual_checksum,
        }


@dataclass
class VerifyResult:
    assets: list[VerifyAssetResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    manifest_found: bool = True

    @classmethod
    def no_manifest(cls) -> VerifyResult:
        return cls(
            errors=["No manifest found. Run 'copilot-assets init' first."],
            manifest_found=False,
        )

    def count(self, status: VerifyStatus) -> int:
        return sum(1 for a in self.assets if a.status == status)

    @property
    def exit_code(self) -> int:
        if not self.manifest_found or self.errors:
            return EXIT_ERROR
        if self.count(VerifyStatus.MODIFIED) or self.count(VerifyStatus.MISSING):
            return EXIT_ERROR
        return EXIT_SUCCESS

    def summary(self) -> dict:
        return {
            "total": len(self.assets),
            "valid": self.count(VerifyStatus.VALID),
            "modified": self.count(VerifyStatus.MODIFIED),
            "missing": self.count(VerifyStatus.MISSING),
            "restored": self.count(VerifyStatus.RESTORED),
        }

    def to_dict(self) -> dict:
        return {
            "assets": [a.to_dict() for a in self.assets],
            "summary": self.summary(),
        }


# --- Validate ---


@dataclass
class ValidationResult:
    """Compliance findings. Only errors make a project non-compliant."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    info: list[str] = field(default_factory=list)

    @property
    def is_compliant(self) -> bool:
        return not self.errors

    @property
    def exit_code(self) -> int:
        return EXIT_SUCCESS if self.is_compliant else EXIT_ERROR

    def to_dict(self) -> dict:
        return {"compliant": self.is_compliant, "info": list(self.info)}


# --- List ---


@dataclass
class AssetInfo:
    type: str
    name: str
    path: str
    valid: bool
    checksum: str | None = None
    reason: str | None = None  # modified | missing

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "name": self.name,
            "path": self.path,
            "valid": self.valid,
            "checksum": self.checksum,
            "reason": self.reason,
        }


@dataclass
class AssetListResult:
    project_path: str
    assets: list[AssetInfo] = field(default_factory=list)
    source: TemplateSource | None = None

    def summary(self) -> dict:
        return {
            "total": len(self.assets),
            "valid": sum(1 for a in self.assets if a.valid),
            "modified": sum(1 for a in self.assets if a.reason == "modified"),
            "missing": sum(1 for a in self.assets if a.reason == "missing"),
        }

    def to_dict(self) -> dict:
        return {
            "projectPath": self.project_path,
            "assets": [a.to_dict() for a in self.assets],
            "summary": self.summary(),
            "source": self.source.to_dict() if self.source else None,
        }


# --- Doctor ---


@dataclass
class DiagnosticsResult:
    tool_version: str
    git_available: bool = False
    is_git_repository: bool = False
    home_directory_exists: bool = False
    manifest_exists: bool = False
    templates_available: bool = False
    source: TemplateSource | None = None
    issues: list[str] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    def to_dict(self) -> dict:
        return {
            "toolVersion": self.tool_version,
            "gitAvailable": self.git_available,
            "isGitRepository": self.is_git_repository,
            "homeDirectoryExists": self.home_directory_exists,
            "manifestExists": self.manifest_exists,
            "templatesAvailable": self.templates_available,
            "source": self.source.to_dict() if self.source else None,
            "issues": list(self.issues),
        }
