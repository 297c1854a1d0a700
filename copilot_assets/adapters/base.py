"""Output adapter contract and the shared content transforms.

An adapter is a pure pair of functions for one target tool: where an asset
goes (relative to the project root) and what its content becomes. Adapters
never touch the filesystem.

Templates may carry tool-specific sections::

    <!-- claude-only -->
    Only Claude sees this.
    <!-- /claude-only -->

Sections for other tools are removed, the kept tool's markers are dropped
and its content stays.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePosixPath

from copilot_assets.models.assets import AssetCategory, TargetTool

KNOWN_TOOLS = tuple(t.value for t in TargetTool)

# Secondary suffixes used by template names: review.prompt.md, planner.agent.md
_CATEGORY_SUFFIXES = (".prompt", ".agent", ".instructions", ".skill")

_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class AssetMetadata:
    """What an adapter knows about the asset it is transforming."""

    file_name: str
    relative_path: str
    category: AssetCategory

    @classmethod
    def for_path(cls, relative_path: str) -> AssetMetadata:
        return cls(
            file_name=PurePosixPath(relative_path).name,
            relative_path=relative_path,
            category=AssetCategory.from_path(relative_path),
        )


def strip_tool_sections(content: str, keep: str, tools: Iterable[str] = KNOWN_TOOLS) -> str:
    """Keep only the sections meant for *keep*.

    For every other tool, marker pairs and everything between them are
    removed, first pair first, until that tool has no complete pair left.
    An unterminated start marker is left as is. Runs of blank lines are
    collapsed, the result trimmed and given one trailing newline.
    """
    result = content
    keep = keep.lower()

    for tool in tools:
        if tool.lower() == keep:
            continue
        start_re = re.compile(re.escape(f"<!-- {tool}-only -->"), re.IGNORECASE)
        end_re = re.compile(re.escape(f"<!-- /{tool}-only -->"), re.IGNORECASE)

        while True:
            start = start_re.search(result)
            if start is None:
                break
            end = end_re.search(result, start.end())
            if end is None:
                break
            result = result[:start.start()] + result[end.end():]

    for marker in (f"<!-- {keep}-only -->", f"<!-- /{keep}-only -->"):
        result = re.sub(re.escape(marker), "", result, flags=re.IGNORECASE)

    result = _EXCESS_NEWLINES_RE.sub("\n\n", result)
    return result.strip() + "\n"


def extract_first_heading(content: str) -> str | None:
    """Text of the first Markdown heading, or None."""
    for line in content.split("\n"):
        stripped = line.lstrip()
        if stripped.startswith("#"):
            heading = stripped.lstrip("#").strip()
            if heading:
                return heading
    return None


def file_stem(file_name: str) -> str:
    """``review.prompt.md`` → ``review``; ``notes.md`` → ``notes``."""
    stem = PurePosixPath(file_name).stem
    for suffix in _CATEGORY_SUFFIXES:
        if stem.lower().endswith(suffix):
            return stem[: -len(suffix)]
    return stem


def skill_name(relative_path: str) -> str:
    """``skills/<name>/...`` → ``<name>``; a loose ``skills/x.md`` → ``x``."""
    parts = relative_path.split("/")
    if len(parts) >= 3:
        return parts[1]
    return file_stem(parts[-1])


def skill_rest(relative_path: str) -> str:
    """Path inside the skill folder: ``skills/lint/SKILL.md`` → ``SKILL.md``."""
    parts = relative_path.split("/")
    if len(parts) >= 3:
        return "/".join(parts[2:])
    return "SKILL.md"


def flat_name(category: AssetCategory, relative_path: str, extension: str) -> str:
    """File name for tools that keep every asset in one directory.

    The category is kept as a secondary suffix so it can be recovered
    from the output path: ``review.prompt.md``, ``lint.skill.mdc``.
    """
    file_name = PurePosixPath(relative_path).name
    if category == AssetCategory.SKILL:
        name = skill_name(relative_path)
        rest = skill_rest(relative_path)
        if rest != "SKILL.md":
            name = f"{name}-{file_stem(rest.replace('/', '-'))}"
        return f"{name}.skill{extension}"
    return f"{file_stem(file_name)}.{category.value}{extension}"


def category_from_flat_name(file_name: str) -> AssetCategory:
    stem = PurePosixPath(file_name).stem
    marker = PurePosixPath(stem).suffix.lstrip(".").lower()
    for category in (AssetCategory.PROMPT, AssetCategory.AGENT, AssetCategory.SKILL):
        if marker == category.value:
            return category
    return AssetCategory.PROMPT


class OutputAdapter(ABC):
    """Maps assets onto one target tool's file layout."""

    target: TargetTool
    home_dir: str
    instruction_path: str

    @abstractmethod
    def output_path(self, category: AssetCategory, relative_path: str) -> str:
        """Output path relative to the project root, forward slashes."""

    def transform_content(self, content: str, metadata: AssetMetadata) -> str:
        return strip_tool_sections(content, self.target.value)

    def managed_directories(self) -> list[str]:
        return [self.home_dir]

    def classify(self, output_path: str) -> AssetCategory:
        """Recover the category of an asset this adapter wrote to *output_path*."""
        if output_path == self.instruction_path:
            return AssetCategory.INSTRUCTION
        return category_from_flat_name(PurePosixPath(output_path).name)
