"""Template source contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from copilot_assets.models.assets import AssetCategory
from copilot_assets.models.manifest import TemplateSource


@dataclass(frozen=True)
class TemplateFile:
    """A template, with a forward-slash path relative to the source root."""

    relative_path: str
    content: str

    @property
    def category(self) -> AssetCategory:
        return AssetCategory.from_path(self.relative_path)

    @property
    def file_name(self) -> str:
        return self.relative_path.rsplit("/", 1)[-1]


@dataclass
class TemplateResult:
    templates: list[TemplateFile] = field(default_factory=list)
    source: TemplateSource = field(default_factory=TemplateSource)
    error: str | None = None

    @classmethod
    def failed(cls, source: TemplateSource, error: str) -> TemplateResult:
        return cls(source=source, error=error)

    @property
    def has_templates(self) -> bool:
        return bool(self.templates)

    @property
    def has_error(self) -> bool:
        return bool(self.error)


class TemplateProvider(ABC):
    """Produces the set of templates to sync."""

    @abstractmethod
    def fetch(self) -> TemplateResult:
        """Return the templates, or a result carrying ``error``. Never raises
        for an unavailable source."""

    @abstractmethod
    def is_available(self) -> bool:
        """Cheap check whether :meth:`fetch` could succeed."""
