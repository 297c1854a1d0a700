"""Tests for the sync engine: decisions, manifest construction, dry run and update checks."""

import json
import tempfile
import threading
from pathlib import Path

import pytest

from fakes import StaticProvider

from copilot_assets.errors import SecurityViolation
from copilot_assets.models.assets import AssetTypeFilter, TargetTool
from copilot_assets.models.manifest import MANIFEST_FILENAME, MANIFEST_RELATIVE_PATH
from copilot_assets.models.results import OperationType
from copilot_assets.security.limits import ContentLimits
from copilot_assets.sync.engine import SyncEngine
from copilot_assets.utils.checksum import checksum_file, checksum_text

TEMPLATES = {
    "copilot-instructions.md": "A",
    "prompts/x.md": "B",
}


def _engine(files=None, **kwargs):
    return SyncEngine(StaticProvider(files if files is not None else TEMPLATES, **kwargs))


def _manifest(project: Path) -> dict:
    return json.loads((project / MANIFEST_RELATIVE_PATH).read_text())


# --- Sync ---


def test_sync_into_empty_project():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        result = _engine().sync(project)

        assert result.success
        assert (project / ".github" / "copilot-instructions.md").read_text() == "A"
        assert (project / ".github" / "prompts" / "x.md").read_text() == "B"
        assert [s.relative_path for s in result.synced] == [
            "copilot-instructions.md", "prompts/x.md", MANIFEST_FILENAME,
        ]
        assert not any(s.was_updated for s in result.synced)


def test_manifest_records_synced_assets_but_not_itself():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        result = _engine().sync(project)
        data = _manifest(project)

        assert data["assets"] == ["copilot-instructions.md", "prompts/x.md"]
        assert data["checksums"]["prompts/x.md"] == checksum_text("B")
        assert MANIFEST_FILENAME not in data["checksums"]
        assert data["schemaVersion"] == 1
        assert data["targets"] == []

        manifest_entry = result.synced[-1]
        assert manifest_entry.checksum == checksum_file(project / MANIFEST_RELATIVE_PATH)


def test_sync_twice_is_idempotent():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        engine = _engine()
        engine.sync(project)
        before = (project / ".github" / "prompts" / "x.md").stat().st_mtime_ns

        second = engine.sync(project)
        assert second.unchanged == ["copilot-instructions.md", "prompts/x.md"]
        assert [s.relative_path for s in second.synced] == [MANIFEST_FILENAME]
        assert second.synced[0].was_updated
        assert (project / ".github" / "prompts" / "x.md").stat().st_mtime_ns == before


def test_no_silent_overwrite():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        engine = _engine()
        engine.sync(project)
        target = project / ".github" / "prompts" / "x.md"
        target.write_bytes(b"local edit")

        result = engine.sync(project)
        assert target.read_bytes() == b"local edit"
        assert "prompts/x.md" in result.skipped
        assert "prompts/x.md" not in [s.relative_path for s in result.synced]
        assert any("--force" in w for w in result.warnings)
        assert result.success
        # Skipped files drop out of the new manifest
        assert "prompts/x.md" not in _manifest(project)["assets"]


def test_force_overwrites_local_changes():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        engine = _engine()
        engine.sync(project)
        target = project / ".github" / "prompts" / "x.md"
        target.write_text("local edit")

        result = engine.sync(project, force=True)
        assert target.read_text() == "B"
        assert checksum_file(target) == checksum_text("B")
        entry = next(s for s in result.synced if s.relative_path == "prompts/x.md")
        assert entry.was_updated


def test_filter_only_prompts():
    files = {"prompts/a.md": "A", "agents/b.md": "B"}
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        result = _engine(files).sync(project, asset_filter=AssetTypeFilter.only("prompts"))

        assert [s.relative_path for s in result.synced[:-1]] == ["prompts/a.md"]
        assert result.skipped == ["agents/b.md"]
        assert not (project / ".github" / "agents" / "b.md").exists()


def test_provider_error_writes_nothing():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        result = _engine(error="Templates directory not found: /x").sync(project)

        assert not result.success
        assert result.errors == ["Templates directory not found: /x"]
        assert not (project / ".github").exists()


def test_empty_template_set_is_an_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _engine({}).sync(tmpdir)
        assert result.errors == ["No templates found"]


def test_cancel_stops_before_manifest():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        cancel = threading.Event()
        cancel.set()
        result = _engine().sync(project, cancel=cancel)

        assert result.errors == ["Sync cancelled"]
        assert result.synced == []
        assert not (project / MANIFEST_RELATIVE_PATH).exists()


def test_multi_target_tracking_paths():
    files = {
        "copilot-instructions.md": "# Rules\n<!-- claude-only -->For Claude<!-- /claude-only -->\n",
        "agents/planner.agent.md": "# Planner\n",
    }
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        result = _engine(files).sync(project, targets=[TargetTool.COPILOT, TargetTool.CLAUDE])

        assert result.success
        data = _manifest(project)
        assert data["targets"] == ["copilot", "claude"]
        assert data["assets"] == [
            "copilot-instructions.md",
            "claude:CLAUDE.md",
            "agents/planner.agent.md",
            "claude:.claude/agents/planner.md",
        ]
        assert (project / "CLAUDE.md").read_text() == "# Rules\nFor Claude\n"
        assert (project / ".github" / "copilot-instructions.md").read_text() == "# Rules\n"
        assert (project / ".claude" / "agents" / "planner.md").exists()


def test_output_collision_keeps_first():
    files = {
        "prompts/review.prompt.md": "first",
        "prompts/review.md": "second",
    }
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        result = _engine(files).sync(project, targets=[TargetTool.CLAUDE])

        assert (project / ".claude" / "commands" / "review.md").read_text() == "first\n"
        assert result.skipped == ["claude:.claude/commands/review.md"]
        assert any("already produced by prompts/review.prompt.md" in w for w in result.warnings)


def test_template_escaping_home_raises():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(SecurityViolation):
            _engine({"../evil.md": "x"}).sync(tmpdir)


def _too_many_templates():
    return {f"prompts/p{i}.md": str(i) for i in range(ContentLimits.MAX_ASSET_COUNT + 1)}


def test_too_many_assets_writes_nothing():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        with pytest.raises(SecurityViolation, match="Too many assets"):
            _engine(_too_many_templates()).sync(project)
        assert list(project.rglob("*")) == []


def test_too_many_rendered_assets_counts_every_target():
    files = {f"prompts/p{i}.md": "x" for i in range(ContentLimits.MAX_ASSET_COUNT // 2 + 1)}
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        engine = _engine(files)
        engine.sync(project, targets=[TargetTool.COPILOT])
        before = sorted(project.rglob("*"))

        with pytest.raises(SecurityViolation):
            engine.sync(project, targets=[TargetTool.COPILOT, TargetTool.CLAUDE])
        assert sorted(project.rglob("*")) == before


def test_preview_rejects_too_many_assets():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(SecurityViolation):
            _engine(_too_many_templates()).preview_sync(tmpdir)


# --- Dry run ---


def test_preview_on_empty_project_plans_creates():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        result = _engine().preview_sync(project)

        assert [(o.type, o.path) for o in result.operations] == [
            (OperationType.CREATE, "copilot-instructions.md"),
            (OperationType.CREATE, "prompts/x.md"),
            (OperationType.CREATE, MANIFEST_FILENAME),
        ]
        assert result.exit_code == 2
        assert not (project / ".github").exists()


def test_preview_after_sync_has_nothing_pending():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        engine = _engine()
        engine.sync(project)
        (project / ".github" / "prompts" / "x.md").write_text("edited")

        result = engine.preview_sync(project)
        reasons = {o.path: o.reason for o in result.operations}
        assert reasons["copilot-instructions.md"] == "unchanged"
        assert "--force" in reasons["prompts/x.md"]
        assert result.exit_code == 0
        assert (project / ".github" / "prompts" / "x.md").read_text() == "edited"


def test_preview_force_plans_updates():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        engine = _engine()
        engine.sync(project)
        (project / ".github" / "prompts" / "x.md").write_text("edited")

        result = engine.preview_sync(project, force=True)
        updates = {o.path: o.reason for o in result.operations if o.type == OperationType.UPDATE}
        assert updates["prompts/x.md"] == "content differs"
        assert updates[MANIFEST_FILENAME] == "update manifest"


def test_preview_reports_filter_skips():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _engine().preview_sync(tmpdir, asset_filter=AssetTypeFilter.only("instruction"))
        skips = [o for o in result.operations if o.type == OperationType.SKIP]
        assert [(o.path, o.reason) for o in skips] == [("prompts/x.md", "excluded by filter")]


# --- Update check and listing ---


def test_check_for_updates():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        _engine({"copilot-instructions.md": "A", "prompts/old.md": "O", "prompts/x.md": "B"}).sync(project)

        newer = _engine({"copilot-instructions.md": "A", "prompts/x.md": "B2", "agents/new.md": "N"})
        check = newer.check_for_updates(project)

        assert check.unchanged == ["copilot-instructions.md"]
        assert check.modified == ["prompts/x.md"]
        assert check.added == ["agents/new.md"]
        assert check.removed == ["prompts/old.md"]
        assert check.has_changes


def test_check_for_updates_without_manifest():
    with tempfile.TemporaryDirectory() as tmpdir:
        check = _engine().check_for_updates(tmpdir)
        assert check.not_installed
        assert not check.success


def test_list_assets():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = Path(tmpdir)
        engine = _engine({"copilot-instructions.md": "A", "prompts/x.md": "B", "agents/y.md": "C"})
        engine.sync(project)
        (project / ".github" / "prompts" / "x.md").write_text("edited")
        (project / ".github" / "agents" / "y.md").unlink()

        result = engine.list_assets(project)
        by_path = {a.path: a for a in result.assets}
        assert by_path["copilot-instructions.md"].valid
        assert by_path["copilot-instructions.md"].type == "instruction"
        assert by_path["prompts/x.md"].reason == "modified"
        assert by_path["agents/y.md"].reason == "missing"
        assert result.summary() == {"total": 3, "valid": 1, "modified": 1, "missing": 1}

        agents_only = engine.list_assets(project, AssetTypeFilter.only("agents"))
        assert [a.path for a in agents_only.assets] == ["agents/y.md"]


def test_list_assets_without_manifest():
    with tempfile.TemporaryDirectory() as tmpdir:
        assert _engine().list_assets(tmpdir) is None
