"""Compliance validation for CI.

Uses the same checksum recomputation as verify, but as a policy: drift is
a warning by default and an error in strict (CI) mode. Missing assets,
a missing manifest and anything that looks like a committed secret are
always errors.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

from copilot_assets.adapters.registry import DEFAULT_REGISTRY, AdapterRegistry
from copilot_assets.models.assets import PRIMARY_TARGET
from copilot_assets.models.manifest import HOME_DIR, MANIFEST_FILENAME, MANIFEST_RELATIVE_PATH
from copilot_assets.models.results import ValidationResult
from copilot_assets.security.paths import check_tracking_path, resolve_in_project
from copilot_assets.sync.manifest_store import ManifestStore
from copilot_assets.sync.skills import SKILL_FILENAME, skill_problems
from copilot_assets.utils.checksum import checksum_file

MINIMUM_VERSION = "1.0.0"
REQUIRED_FILES = ("copilot-instructions.md",)
SCANNED_EXTENSIONS = (".md", ".json", ".yaml", ".yml")

_RESTRICTED_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("api_key", re.compile(r"(api[_-]?key|apikey)\s*[:=]\s*['\"]?[a-zA-Z0-9]{20,}", re.IGNORECASE)),
    ("password_assignment", re.compile(
        r"(secret|password|passwd|pwd)\s*[:=]\s*['\"]?[^\s'\",]{8,}", re.IGNORECASE)),
    ("bearer_token", re.compile(r"bearer\s+[a-zA-Z0-9\-_.~+/]{16,}=*", re.IGNORECASE)),
    ("private_key", re.compile(r"-----BEGIN\s+(RSA\s+)?PRIVATE\s+KEY-----")),
    ("github_token", re.compile(r"\bgh[pousr]_[A-Za-z0-9]{36,}\b")),
    ("api_key_aws", re.compile(r"\bAKIA[0-9A-Z]{16}\b")),
]


def find_secret(text: str) -> str | None:
    """Label of the first restricted pattern found in *text*, or None."""
    for label, pattern in _RESTRICTED_PATTERNS:
        if pattern.search(text):
            return label
    return None


def _version_tuple(version: str) -> tuple[int, ...] | None:
    try:
        return tuple(int(part) for part in version.split("."))
    except ValueError:
        return None


def is_version_satisfied(installed: str, minimum: str) -> bool:
    """Unparseable versions are treated as satisfied."""
    installed_v, minimum_v = _version_tuple(installed), _version_tuple(minimum)
    if installed_v is None or minimum_v is None:
        return True
    return installed_v >= minimum_v


class ComplianceValidator:
    def __init__(self, registry: AdapterRegistry = DEFAULT_REGISTRY):
        self.registry = registry

    def validate(self, target_dir: str | Path, strict: bool = False) -> ValidationResult:
        target_dir = Path(target_dir)
        result = ValidationResult()
        drift = result.errors if strict else result.warnings

        if not (target_dir / HOME_DIR).is_dir():
            result.errors.append(
                f"Missing {HOME_DIR} directory. Run 'copilot-assets init' to install assets."
            )
            return result

        manifest = ManifestStore(target_dir).read()
        if manifest is None:
            result.errors.append(
                f"Missing manifest file ({MANIFEST_RELATIVE_PATH}). "
                "Run 'copilot-assets init' to install assets."
            )
            return result

        if not is_version_satisfied(manifest.tool_version, MINIMUM_VERSION):
            result.errors.append(
                f"Asset version {manifest.tool_version} is below minimum required "
                f"{MINIMUM_VERSION}. Run 'copilot-assets update'."
            )

        if not manifest.targets or PRIMARY_TARGET.value in manifest.targets:
            for required in REQUIRED_FILES:
                if not (target_dir / HOME_DIR / required).is_file():
                    result.errors.append(f"Missing required file: {HOME_DIR}/{required}")

        for tracking_path in manifest.assets:
            name = PurePosixPath(tracking_path).name
            if name == MANIFEST_FILENAME:
                continue
            display = check_tracking_path(tracking_path)
            path = resolve_in_project(target_dir, tracking_path)

            if not path.is_file():
                result.errors.append(f"Missing asset: {display}")
                continue

            expected = manifest.checksums.get(tracking_path)
            if expected is not None and checksum_file(path) != expected:
                if strict:
                    drift.append(f"File modified: {display} (checksum mismatch)")
                else:
                    drift.append(f"File modified locally: {display}")

            if path.suffix.lower() not in SCANNED_EXTENSIONS:
                continue
            content = path.read_text(encoding="utf-8", errors="replace")

            label = find_secret(content)
            if label is not None:
                result.errors.append(f"Potential secret detected in {display} ({label})")

            if name == SKILL_FILENAME:
                for problem in skill_problems(content):
                    drift.append(f"Malformed skill {display}: {problem}")

        if result.is_compliant:
            result.info.append(
                f"All validations passed ({len(manifest.assets)} tracked asset(s), "
                f"version {manifest.tool_version})"
            )
        return result
