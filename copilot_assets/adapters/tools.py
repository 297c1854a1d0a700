"""One output adapter per supported target tool."""

from __future__ import annotations

import yaml

from copilot_assets.adapters.base import (
    AssetMetadata,
    OutputAdapter,
    extract_first_heading,
    file_stem,
    flat_name,
    skill_name,
    skill_rest,
    strip_tool_sections,
)
from copilot_assets.models.assets import AssetCategory, TargetTool
from copilot_assets.models.manifest import HOME_DIR


class CopilotOutputAdapter(OutputAdapter):
    """GitHub Copilot — templates already use its ``.github/`` layout."""

    target = TargetTool.COPILOT
    home_dir = HOME_DIR
    instruction_path = f"{HOME_DIR}/copilot-instructions.md"

    def output_path(self, category: AssetCategory, relative_path: str) -> str:
        return f"{self.home_dir}/{relative_path}"

    def classify(self, output_path: str) -> AssetCategory:
        prefix = f"{self.home_dir}/"
        if output_path.startswith(prefix):
            output_path = output_path[len(prefix):]
        return AssetCategory.from_path(output_path)


class ClaudeOutputAdapter(OutputAdapter):
    """Claude Code — ``CLAUDE.md`` plus commands, agents and skills under ``.claude/``."""

    target = TargetTool.CLAUDE
    home_dir = ".claude"
    instruction_path = "CLAUDE.md"

    def output_path(self, category: AssetCategory, relative_path: str) -> str:
        name = file_stem(relative_path.rsplit("/", 1)[-1])
        if category == AssetCategory.INSTRUCTION:
            return self.instruction_path
        if category == AssetCategory.AGENT:
            return f"{self.home_dir}/agents/{name}.md"
        if category == AssetCategory.SKILL:
            return f"{self.home_dir}/skills/{skill_name(relative_path)}/{skill_rest(relative_path)}"
        return f"{self.home_dir}/commands/{name}.md"

    def classify(self, output_path: str) -> AssetCategory:
        if output_path == self.instruction_path:
            return AssetCategory.INSTRUCTION
        if output_path.startswith(f"{self.home_dir}/skills/"):
            return AssetCategory.SKILL
        if output_path.startswith(f"{self.home_dir}/agents/"):
            return AssetCategory.AGENT
        return AssetCategory.PROMPT


class CursorOutputAdapter(OutputAdapter):
    """Cursor — ``.mdc`` rule files with YAML frontmatter."""

    target = TargetTool.CURSOR
    home_dir = ".cursor/rules"
    instruction_path = ".cursor/rules/instructions.mdc"

    def output_path(self, category: AssetCategory, relative_path: str) -> str:
        if category == AssetCategory.INSTRUCTION:
            return self.instruction_path
        return f"{self.home_dir}/{flat_name(category, relative_path, '.mdc')}"

    def transform_content(self, content: str, metadata: AssetMetadata) -> str:
        body = strip_tool_sections(content, self.target.value)
        description = extract_first_heading(body) or metadata.file_name
        frontmatter = yaml.safe_dump(
            {"description": description, "alwaysApply": True},
            sort_keys=False,
            allow_unicode=True,
        )
        return f"---\n{frontmatter}---\n{body}"


class WindsurfOutputAdapter(OutputAdapter):
    """Windsurf — one ``.windsurfrules`` file plus ``.windsurf/rules/``."""

    target = TargetTool.WINDSURF
    home_dir = ".windsurf"
    instruction_path = ".windsurfrules"

    def output_path(self, category: AssetCategory, relative_path: str) -> str:
        if category == AssetCategory.INSTRUCTION:
            return self.instruction_path
        return f"{self.home_dir}/rules/{flat_name(category, relative_path, '.md')}"


class ClineOutputAdapter(OutputAdapter):
    """Cline — everything under ``.clinerules/``."""

    target = TargetTool.CLINE
    home_dir = ".clinerules"
    instruction_path = ".clinerules/instructions.md"

    def output_path(self, category: AssetCategory, relative_path: str) -> str:
        if category == AssetCategory.INSTRUCTION:
            return self.instruction_path
        return f"{self.home_dir}/{flat_name(category, relative_path, '.md')}"


class AiderOutputAdapter(OutputAdapter):
    """Aider — ``CONVENTIONS.md`` plus prompt files under ``.aider/prompts/``."""

    target = TargetTool.AIDER
    home_dir = ".aider"
    instruction_path = "CONVENTIONS.md"

    def output_path(self, category: AssetCategory, relative_path: str) -> str:
        if category == AssetCategory.INSTRUCTION:
            return self.instruction_path
        return f"{self.home_dir}/prompts/{flat_name(category, relative_path, '.md')}"
