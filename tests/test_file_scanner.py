"""Tests for the template file scanner."""

import tempfile
from pathlib import Path

from copilot_assets.security.limits import ContentLimits
from copilot_assets.utils.file_scanner import SKIP_DIRS, scan_template_files, to_relative_posix


def test_scan_finds_templates_sorted():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "prompts").mkdir()
        (root / "prompts" / "b.prompt.md").write_text("# B")
        (root / "prompts" / "a.prompt.md").write_text("# A")
        (root / "copilot-instructions.md").write_text("# Rules")

        files = scan_template_files(root)
        assert [to_relative_posix(f, root) for f in files] == [
            "copilot-instructions.md",
            "prompts/a.prompt.md",
            "prompts/b.prompt.md",
        ]


def test_scan_skips_excluded_dirs_and_extensions():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "node_modules").mkdir()
        (root / "node_modules" / "lib.md").write_text("x")
        (root / "script.sh").write_text("echo hi")
        (root / "keep.md").write_text("kept")

        files = scan_template_files(root)
        assert [f.name for f in files] == ["keep.md"]


def test_scan_skips_oversized_files():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "big.md").write_text("x" * (ContentLimits.MAX_FILE_SIZE + 1))
        (root / "small.md").write_text("x")

        assert [f.name for f in scan_template_files(root)] == ["small.md"]


def test_skip_dirs_contains_expected():
    assert ".git" in SKIP_DIRS
    assert "node_modules" in SKIP_DIRS
    assert "__pycache__" in SKIP_DIRS
