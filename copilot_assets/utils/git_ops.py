"""Git operations — detect repositories, maintain .gitignore, stage files.

These run after a sync has finished; nothing here influences which files
are written.
"""

from __future__ import annotations

from pathlib import Path

from git import (
    GitCommandError,
    GitCommandNotFound,
    InvalidGitRepositoryError,
    NoSuchPathError,
    Repo,
)
from git.cmd import Git

# Negations so a broad ignore rule never hides installed assets
ASSET_GITIGNORE_PATTERNS = (
    "# GitHub Copilot Assets - DO NOT IGNORE",
    "!.github/copilot-instructions.md",
    "!.github/prompts/",
    "!.github/prompts/**",
    "!.github/agents/",
    "!.github/agents/**",
    "!.github/skills/",
    "!.github/skills/**",
    "!.github/.copilot-assets.json",
)


def is_git_available() -> bool:
    """Return True when a usable ``git`` executable is on the PATH."""
    try:
        Git().version()
    except (GitCommandError, GitCommandNotFound, OSError):
        return False
    return True


def is_repository(path: str | Path) -> bool:
    """Return True when *path* is inside a Git working tree."""
    try:
        Repo(Path(path), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return False
    return True


def repository_root(path: str | Path) -> Path | None:
    """Top of the working tree containing *path*, or None outside a repository."""
    try:
        repo = Repo(Path(path), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return None
    return Path(repo.working_tree_dir) if repo.working_tree_dir else None


def missing_gitignore_patterns(
    repo_path: str | Path, patterns: tuple[str, ...] = ASSET_GITIGNORE_PATTERNS
) -> list[str]:
    """Patterns not yet present, line for line, in *repo_path*/.gitignore."""
    gitignore = Path(repo_path) / ".gitignore"
    content = gitignore.read_text(encoding="utf-8") if gitignore.exists() else ""
    present = {line.strip() for line in content.splitlines()}
    return [p for p in patterns if p.strip() not in present]


def ensure_gitignore_patterns(
    repo_path: str | Path, patterns: tuple[str, ...] = ASSET_GITIGNORE_PATTERNS
) -> bool:
    """Append the missing *patterns* to .gitignore so assets stay tracked.

    Returns True when the file was modified.
    """
    missing = missing_gitignore_patterns(repo_path, patterns)
    if not missing:
        return False

    gitignore = Path(repo_path) / ".gitignore"
    content = gitignore.read_text(encoding="utf-8") if gitignore.exists() else ""
    if content and not content.endswith("\n"):
        content += "\n"
    if content.strip():
        content += "\n"
    content += "\n".join(missing) + "\n"
    gitignore.write_text(content, encoding="utf-8")
    return True


def stage_files(repo_path: str | Path, files: list[str]) -> list[str]:
    """Add *files* to the index. Returns the staged paths relative to the work tree."""
    repo = Repo(Path(repo_path), search_parent_directories=True)
    root = Path(repo.working_tree_dir)

    relative = []
    for f in files:
        p = Path(f).resolve().relative_to(root.resolve())
        relative.append(p.as_posix())

    repo.index.add(relative)
    return relative
