"""SKILL.md parsing.

A skill file opens with YAML frontmatter naming the skill::

    ---
    name: code-review
    description: Review a change for correctness
    ---
    # Code review
    ...
"""

from __future__ import annotations

from dataclasses import dataclass, field

import yaml

from copilot_assets.adapters.base import extract_first_heading

SKILL_FILENAME = "SKILL.md"


@dataclass
class SkillDocument:
    frontmatter: dict = field(default_factory=dict)
    body: str = ""

    @property
    def name(self) -> str | None:
        value = self.frontmatter.get("name")
        if isinstance(value, str) and value.strip():
            return value.strip()
        return extract_first_heading(self.body)


def parse_skill(content: str) -> SkillDocument:
    """Split *content* into frontmatter and body.

    Raises:
        ValueError: the frontmatter is not a YAML mapping.
    """
    text = content.lstrip("\ufeff")
    if not text.startswith("---"):
        return SkillDocument(body=text)

    lines = text.split("\n")
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            raw = "\n".join(lines[1:i])
            body = "\n".join(lines[i + 1:])
            break
    else:
        raise ValueError("Unterminated frontmatter block")

    try:
        data = yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Frontmatter must be a mapping")
    return SkillDocument(frontmatter=data, body=body)


def skill_problems(content: str) -> list[str]:
    """Return what is wrong with a SKILL.md, empty when it is well formed."""
    try:
        doc = parse_skill(content)
    except ValueError as e:
        return [str(e)]

    problems = []
    if not doc.name:
        problems.append("no 'name' in frontmatter and no heading")
    if not doc.body.strip():
        problems.append("empty body")
    return problems
