"""Tests for section stripping, per-tool output adapters and the adapter registry."""

import pytest
import yaml

from copilot_assets.adapters.base import (
    AssetMetadata,
    extract_first_heading,
    file_stem,
    flat_name,
    strip_tool_sections,
)
from copilot_assets.adapters.registry import DEFAULT_REGISTRY, AdapterRegistry
from copilot_assets.adapters.tools import (
    ClaudeOutputAdapter,
    CopilotOutputAdapter,
    CursorOutputAdapter,
)
from copilot_assets.models.assets import AssetCategory, TargetTool


# --- Section stripping ---


def test_strip_keeps_only_requested_tool():
    content = "<!-- a-only -->X<!-- /a-only --><!-- b-only -->Y<!-- /b-only -->"
    assert strip_tool_sections(content, "b", tools=("a", "b")) == "Y\n"


def test_strip_removes_every_pair_of_other_tools():
    content = (
        "Intro\n<!-- claude-only -->one<!-- /claude-only -->\nMiddle\n"
        "<!-- claude-only -->two<!-- /claude-only -->\nEnd\n"
    )
    result = strip_tool_sections(content, "copilot")
    assert "one" not in result and "two" not in result
    assert result == "Intro\n\nMiddle\n\nEnd\n"


def test_strip_markers_are_case_insensitive():
    content = "<!-- CLAUDE-ONLY -->hidden<!-- /Claude-Only -->shown"
    assert strip_tool_sections(content, "cursor") == "shown\n"


def test_strip_leaves_unterminated_marker_alone():
    content = "before <!-- claude-only --> after"
    assert strip_tool_sections(content, "copilot") == "before <!-- claude-only --> after\n"


def test_strip_collapses_blank_lines_and_trims():
    content = "\n\nA\n\n\n\n\nB\n\n\n"
    assert strip_tool_sections(content, "copilot") == "A\n\nB\n"


def test_strip_removes_kept_markers_only():
    content = "<!-- copilot-only -->\nKeep me\n<!-- /copilot-only -->"
    assert strip_tool_sections(content, "copilot") == "Keep me\n"


def test_extract_first_heading():
    assert extract_first_heading("intro\n## Review Guide\n# Other") == "Review Guide"
    assert extract_first_heading("no headings here") is None


# --- Names ---


def test_file_stem_strips_category_suffix():
    assert file_stem("review.prompt.md") == "review"
    assert file_stem("planner.agent.md") == "planner"
    assert file_stem("notes.md") == "notes"


def test_flat_name_keeps_category():
    assert flat_name(AssetCategory.PROMPT, "prompts/review.prompt.md", ".md") == "review.prompt.md"
    assert flat_name(AssetCategory.AGENT, "agents/planner.agent.md", ".mdc") == "planner.agent.mdc"
    assert flat_name(AssetCategory.SKILL, "skills/lint/SKILL.md", ".md") == "lint.skill.md"
    assert flat_name(AssetCategory.SKILL, "skills/lint/rules.md", ".md") == "lint-rules.skill.md"


# --- Adapters ---


def test_copilot_preserves_layout():
    adapter = CopilotOutputAdapter()
    assert adapter.output_path(AssetCategory.PROMPT, "prompts/a.prompt.md") == ".github/prompts/a.prompt.md"
    assert adapter.output_path(AssetCategory.INSTRUCTION, "copilot-instructions.md") == (
        ".github/copilot-instructions.md"
    )
    assert adapter.classify(".github/agents/x.agent.md") == AssetCategory.AGENT


def test_claude_paths():
    adapter = ClaudeOutputAdapter()
    assert adapter.output_path(AssetCategory.INSTRUCTION, "copilot-instructions.md") == "CLAUDE.md"
    assert adapter.output_path(AssetCategory.PROMPT, "prompts/review.prompt.md") == (
        ".claude/commands/review.md"
    )
    assert adapter.output_path(AssetCategory.AGENT, "agents/planner.agent.md") == (
        ".claude/agents/planner.md"
    )
    assert adapter.output_path(AssetCategory.SKILL, "skills/lint/SKILL.md") == (
        ".claude/skills/lint/SKILL.md"
    )


def test_claude_classify():
    adapter = ClaudeOutputAdapter()
    assert adapter.classify("CLAUDE.md") == AssetCategory.INSTRUCTION
    assert adapter.classify(".claude/commands/review.md") == AssetCategory.PROMPT
    assert adapter.classify(".claude/agents/planner.md") == AssetCategory.AGENT
    assert adapter.classify(".claude/skills/lint/SKILL.md") == AssetCategory.SKILL


def test_claude_transform_strips_other_tools():
    adapter = ClaudeOutputAdapter()
    meta = AssetMetadata.for_path("copilot-instructions.md")
    content = "# Rules\n<!-- cursor-only -->cursor<!-- /cursor-only -->\n<!-- claude-only -->claude<!-- /claude-only -->"
    result = adapter.transform_content(content, meta)
    assert "cursor" not in result
    assert "claude" in result
    assert "<!--" not in result


def test_cursor_wraps_in_frontmatter():
    adapter = CursorOutputAdapter()
    meta = AssetMetadata.for_path("prompts/review.prompt.md")
    result = adapter.transform_content("# Code Review\n\nCheck it.\n", meta)

    assert result.startswith("---\n")
    _, frontmatter, body = result.split("---\n", 2)
    assert yaml.safe_load(frontmatter) == {"description": "Code Review", "alwaysApply": True}
    assert body == "# Code Review\n\nCheck it.\n"


def test_cursor_description_falls_back_to_file_name():
    adapter = CursorOutputAdapter()
    meta = AssetMetadata.for_path("prompts/plain.prompt.md")
    result = adapter.transform_content("no heading", meta)
    assert "description: plain.prompt.md" in result


def test_flattening_adapters_round_trip_category():
    for tool in (TargetTool.CURSOR, TargetTool.WINDSURF, TargetTool.CLINE, TargetTool.AIDER):
        adapter = DEFAULT_REGISTRY.get(tool)
        for rel in ("copilot-instructions.md", "prompts/a.prompt.md", "agents/b.agent.md", "skills/c/SKILL.md"):
            category = AssetCategory.from_path(rel)
            assert adapter.classify(adapter.output_path(category, rel)) == category, (tool, rel)


def test_instruction_paths():
    expected = {
        TargetTool.WINDSURF: ".windsurfrules",
        TargetTool.CLINE: ".clinerules/instructions.md",
        TargetTool.AIDER: "CONVENTIONS.md",
        TargetTool.CURSOR: ".cursor/rules/instructions.mdc",
    }
    for tool, path in expected.items():
        adapter = DEFAULT_REGISTRY.get(tool)
        assert adapter.output_path(AssetCategory.INSTRUCTION, "copilot-instructions.md") == path


# --- Registry ---


def test_registry_covers_every_tool():
    assert set(DEFAULT_REGISTRY.available_targets) == set(TargetTool)


def test_registry_rejects_missing_adapter():
    with pytest.raises(ValueError, match="No output adapter"):
        AdapterRegistry([CopilotOutputAdapter()])


def test_registry_rejects_duplicates():
    with pytest.raises(ValueError, match="Duplicate"):
        AdapterRegistry([CopilotOutputAdapter(), CopilotOutputAdapter()])


def test_registry_for_targets_dedupes():
    adapters = DEFAULT_REGISTRY.for_targets([TargetTool.CLAUDE, TargetTool.CLAUDE, TargetTool.COPILOT])
    assert [a.target for a in adapters] == [TargetTool.CLAUDE, TargetTool.COPILOT]


def test_registry_for_tracking_path():
    adapter, path = DEFAULT_REGISTRY.for_tracking_path("prompts/a.md")
    assert adapter.target == TargetTool.COPILOT
    assert path == ".github/prompts/a.md"

    adapter, path = DEFAULT_REGISTRY.for_tracking_path("claude:.claude/agents/p.md")
    assert adapter.target == TargetTool.CLAUDE
    assert path == ".claude/agents/p.md"


def test_managed_directories():
    assert DEFAULT_REGISTRY.get(TargetTool.COPILOT).managed_directories() == [".github"]
    assert DEFAULT_REGISTRY.get(TargetTool.CURSOR).managed_directories() == [".cursor/rules"]
    assert DEFAULT_REGISTRY.get(TargetTool.AIDER).managed_directories() == [".aider"]


def test_registry_unknown_prefix_stays_under_home():
    adapter, path = DEFAULT_REGISTRY.for_tracking_path("notes:today.md")
    assert adapter.target == TargetTool.COPILOT
    assert path == ".github/notes:today.md"
