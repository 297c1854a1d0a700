"""Manifest validation — run on every manifest before it is trusted."""

from __future__ import annotations

from copilot_assets.errors import SecurityViolation
from copilot_assets.models.manifest import Manifest
from copilot_assets.security.limits import ContentLimits
from copilot_assets.security.paths import check_tracking_path
from copilot_assets.utils.checksum import is_sha256


def check_asset_count(count: int) -> None:
    if count > ContentLimits.MAX_ASSET_COUNT:
        raise SecurityViolation(
            f"Too many assets: {count} (max: {ContentLimits.MAX_ASSET_COUNT})"
        )


def validate_manifest(manifest: Manifest) -> None:
    """Raise ``SecurityViolation`` if *manifest* cannot be trusted.

    Checks the tracked-asset count, every tracking path, that each checksum
    key is a tracked asset, and that every checksum is a SHA-256 hex digest.
    """
    check_asset_count(len(manifest.assets))

    for tracking_path in manifest.assets:
        check_tracking_path(tracking_path)

    tracked = set(manifest.assets)
    for tracking_path, checksum in manifest.checksums.items():
        if tracking_path not in tracked:
            raise SecurityViolation(f"Checksum recorded for untracked asset: {tracking_path}")
        if not isinstance(checksum, str) or not checksum.strip():
            raise SecurityViolation(f"Missing checksum for asset: {tracking_path}")
        if not is_sha256(checksum):
            raise SecurityViolation(
                f"Invalid checksum format for asset '{tracking_path}': {checksum}"
            )
