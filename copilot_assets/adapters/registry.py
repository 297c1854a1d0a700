"""Adapter registry — one adapter instance per target tool.

The registry is built once and checked against ``TargetTool`` so that a
tool without an adapter is an import-time failure, not a lookup error
halfway through a sync.
"""

from __future__ import annotations

from collections.abc import Iterable

from copilot_assets.adapters.base import OutputAdapter
from copilot_assets.adapters.tools import (
    AiderOutputAdapter,
    ClaudeOutputAdapter,
    ClineOutputAdapter,
    CopilotOutputAdapter,
    CursorOutputAdapter,
    WindsurfOutputAdapter,
)
from copilot_assets.models.assets import TargetTool
from copilot_assets.security.paths import resolve_tracking_path, split_tracking_path


class AdapterRegistry:
    """Maps each ``TargetTool`` to its adapter."""

    def __init__(self, adapters: Iterable[OutputAdapter]):
        self._adapters: dict[TargetTool, OutputAdapter] = {}
        for adapter in adapters:
            if adapter.target in self._adapters:
                raise ValueError(f"Duplicate adapter for {adapter.target.value}")
            self._adapters[adapter.target] = adapter

        missing = [t.value for t in TargetTool if t not in self._adapters]
        if missing:
            raise ValueError(f"No output adapter registered for: {', '.join(missing)}")

    def get(self, tool: TargetTool) -> OutputAdapter:
        return self._adapters[tool]

    def for_targets(self, targets: Iterable[TargetTool]) -> list[OutputAdapter]:
        """Adapters for *targets* in order, without duplicates."""
        seen: list[TargetTool] = []
        for tool in targets:
            if tool not in seen:
                seen.append(tool)
        return [self._adapters[t] for t in seen]

    def for_tracking_path(self, tracking_path: str) -> tuple[OutputAdapter, str]:
        """The adapter owning *tracking_path* and its project-relative path."""
        tool, _ = split_tracking_path(tracking_path)
        return self._adapters[tool], resolve_tracking_path(tracking_path)

    @property
    def available_targets(self) -> list[TargetTool]:
        return list(self._adapters)


DEFAULT_REGISTRY = AdapterRegistry(
    [
        CopilotOutputAdapter(),
        ClaudeOutputAdapter(),
        CursorOutputAdapter(),
        WindsurfOutputAdapter(),
        ClineOutputAdapter(),
        AiderOutputAdapter(),
    ]
)
