"""SHA-256 checksums for content comparison and the manifest."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

_SHA256_RE = re.compile(r"^[0-9a-f]{64}$")


def checksum_text(content: str) -> str:
    """Checksum of *content* exactly as it is written to disk (UTF-8)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def checksum_file(path: str | Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def is_sha256(value: str) -> bool:
    """True for exactly 64 lowercase hex characters."""
    return bool(_SHA256_RE.match(value or ""))
