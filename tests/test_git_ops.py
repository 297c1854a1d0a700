"""Tests for the .gitignore helpers."""

import tempfile
from pathlib import Path

from copilot_assets.utils.git_ops import (
    ASSET_GITIGNORE_PATTERNS,
    ensure_gitignore_patterns,
    is_repository,
    missing_gitignore_patterns,
)


def test_gitignore_created_with_patterns():
    with tempfile.TemporaryDirectory() as tmpdir:
        assert ensure_gitignore_patterns(tmpdir)
        lines = (Path(tmpdir) / ".gitignore").read_text().splitlines()
        assert lines == list(ASSET_GITIGNORE_PATTERNS)


def test_gitignore_appends_after_existing_content():
    with tempfile.TemporaryDirectory() as tmpdir:
        gitignore = Path(tmpdir) / ".gitignore"
        gitignore.write_text("node_modules/\n!.github/prompts/")

        assert ensure_gitignore_patterns(tmpdir)
        content = gitignore.read_text()
        assert content.startswith("node_modules/\n!.github/prompts/\n\n")
        assert content.count("!.github/prompts/\n") == 1
        assert missing_gitignore_patterns(tmpdir) == []


def test_gitignore_untouched_when_complete():
    with tempfile.TemporaryDirectory() as tmpdir:
        ensure_gitignore_patterns(tmpdir)
        assert not ensure_gitignore_patterns(tmpdir)


def test_plain_directory_is_not_a_repository():
    with tempfile.TemporaryDirectory() as tmpdir:
        assert not is_repository(tmpdir)
