"""Content limits for templates and manifests."""

from __future__ import annotations

from pathlib import PurePosixPath


class ContentLimits:
    MAX_FILE_SIZE = 1_048_576  # 1 MiB per template file
    MAX_ASSET_COUNT = 500  # tracked assets per manifest
    MAX_MANIFEST_SIZE = 102_400  # 100 KiB
    ALLOWED_EXTENSIONS = (".md", ".txt", ".json", ".yaml", ".yml")

    @classmethod
    def is_allowed_extension(cls, filename: str) -> bool:
        suffix = PurePosixPath(filename).suffix.lower()
        return not suffix or suffix in cls.ALLOWED_EXTENSIONS
