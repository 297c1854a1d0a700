"""Result presentation — human-readable console output or one JSON envelope.

The output mode is chosen per command invocation and handed to a
``Presenter``; nothing below the CLI knows which mode is active.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import datetime, timezone
from enum import Enum

import click
from rich.console import Console
from rich.table import Table

from copilot_assets import __version__
from copilot_assets.models.results import EXIT_ERROR


class OutputMode(Enum):
    HUMAN = "human"
    JSON = "json"

    @classmethod
    def from_flag(cls, json_output: bool) -> OutputMode:
        return cls.JSON if json_output else cls.HUMAN


def envelope(
    command: str,
    result: dict | None,
    exit_code: int,
    errors: Iterable[str] = (),
    warnings: Iterable[str] = (),
) -> dict:
    return {
        "command": command,
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "success": exit_code != EXIT_ERROR,
        "exitCode": exit_code,
        "result": result,
        "errors": list(errors),
        "warnings": list(warnings),
    }


class Presenter:
    """Writes progress and results for one command in the chosen mode.

    In JSON mode every console method is silent and :meth:`finish` prints
    the envelope, so stdout holds exactly one JSON document.
    """

    def __init__(self, mode: OutputMode, console: Console | None = None):
        self.mode = mode
        self.console = console or Console(highlight=False, soft_wrap=True)

    @property
    def is_json(self) -> bool:
        return self.mode == OutputMode.JSON

    def print(self, text: str = "") -> None:
        if not self.is_json:
            self.console.print(text)

    def heading(self, text: str) -> None:
        self.print(f"\n[bold blue]copilot-assets[/] — {text}\n")

    def success(self, text: str) -> None:
        self.print(f"  [green]v[/] {text}")

    def info(self, text: str) -> None:
        self.print(f"  {text}")

    def warning(self, text: str) -> None:
        self.print(f"  [yellow]![/] {text}")

    def error(self, text: str) -> None:
        self.print(f"  [red]x[/] {text}")

    def table(self, table: Table) -> None:
        if not self.is_json:
            self.console.print(table)

    def finish(
        self,
        command: str,
        result: dict | None,
        exit_code: int,
        errors: Iterable[str] = (),
        warnings: Iterable[str] = (),
    ) -> int:
        """Emit the closing output and return *exit_code*."""
        errors, warnings = list(errors), list(warnings)
        if self.is_json:
            click.echo(json.dumps(envelope(command, result, exit_code, errors, warnings), indent=2))
            return exit_code

        for w in warnings:
            self.warning(w)
        for e in errors:
            self.error(e)
        return exit_code
