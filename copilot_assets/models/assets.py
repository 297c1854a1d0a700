"""Asset categories, category filters and target tools."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from copilot_assets.errors import InvalidFilterError, InvalidTargetError


class AssetCategory(Enum):
    """What kind of asset a template file is."""

    INSTRUCTION = "instruction"
    PROMPT = "prompt"
    AGENT = "agent"
    SKILL = "skill"

    @classmethod
    def from_path(cls, relative_path: str) -> AssetCategory:
        """Derive the category of a template from its relative path.

        Folder names win over file names; anything unrecognised is a prompt.
        """
        normalized = relative_path.replace("\\", "/")
        folders = normalized.split("/")[:-1]

        for folder, category in _FOLDER_CATEGORIES:
            if folder in folders:
                return category
        if normalized.lower().endswith("copilot-instructions.md"):
            return cls.INSTRUCTION
        return cls.PROMPT


_FOLDER_CATEGORIES = (
    ("prompts", AssetCategory.PROMPT),
    ("agents", AssetCategory.AGENT),
    ("skills", AssetCategory.SKILL),
)

_CATEGORY_NAMES = {
    "instruction": AssetCategory.INSTRUCTION,
    "instructions": AssetCategory.INSTRUCTION,
    "prompt": AssetCategory.PROMPT,
    "prompts": AssetCategory.PROMPT,
    "agent": AssetCategory.AGENT,
    "agents": AssetCategory.AGENT,
    "skill": AssetCategory.SKILL,
    "skills": AssetCategory.SKILL,
}


class AssetTypeFilter:
    """A set of asset categories to include in an operation.

    Build one with :meth:`only` or :meth:`exclude`; both accept either a
    comma separated string (``"prompts,agents"``) or an iterable of names.
    """

    def __init__(self, included: Iterable[AssetCategory]):
        self.included = frozenset(included)
        if not self.included:
            raise InvalidFilterError("Filter must include at least one asset type")

    @classmethod
    def only(cls, value: str | Iterable[str]) -> AssetTypeFilter:
        return cls(_parse_categories(value))

    @classmethod
    def exclude(cls, value: str | Iterable[str]) -> AssetTypeFilter:
        remaining = set(AssetCategory) - _parse_categories(value)
        if not remaining:
            raise InvalidFilterError("Cannot exclude all asset types")
        return cls(remaining)

    def includes(self, category: AssetCategory) -> bool:
        return category in self.included

    def describe(self) -> str:
        return ", ".join(c.value for c in AssetCategory if c in self.included)

    def __repr__(self) -> str:
        return f"AssetTypeFilter({self.describe()})"


def _parse_categories(value: str | Iterable[str]) -> set[AssetCategory]:
    parts = value.split(",") if isinstance(value, str) else list(value)
    categories: set[AssetCategory] = set()

    for part in parts:
        name = part.strip().lower()
        if not name:
            continue
        if name not in _CATEGORY_NAMES:
            raise InvalidFilterError(
                f"Unknown asset type: '{part.strip()}'. "
                "Valid types: instruction, prompts, agents, skills"
            )
        categories.add(_CATEGORY_NAMES[name])

    if not categories:
        raise InvalidFilterError("No valid asset types specified")
    return categories


class TargetTool(Enum):
    """AI coding assistants that consume the synced assets."""

    COPILOT = "copilot"
    CLAUDE = "claude"
    CURSOR = "cursor"
    WINDSURF = "windsurf"
    CLINE = "cline"
    AIDER = "aider"

    @classmethod
    def from_name(cls, name: str) -> TargetTool:
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise InvalidTargetError(
                f"Unknown target tool: '{name.strip()}'. Valid targets: {valid}"
            ) from None

    @classmethod
    def is_known(cls, name: str) -> bool:
        return name.lower() in {t.value for t in cls}


PRIMARY_TARGET = TargetTool.COPILOT


def parse_targets(value: str | Iterable[str]) -> list[TargetTool]:
    """Parse a list of target tool names, keeping order and dropping duplicates."""
    parts = value.split(",") if isinstance(value, str) else list(value)
    tools: list[TargetTool] = []

    for part in parts:
        if not part.strip():
            continue
        tool = TargetTool.from_name(part)
        if tool not in tools:
            tools.append(tool)

    if not tools:
        raise InvalidTargetError("No valid target tools specified")
    return tools
