"""Exception types.

Convention:
- Expected conditions (local conflicts, checksum drift, remote fetch failures)
  are reported through result objects, never raised.
- ``SecurityViolation`` and filter/target construction errors interrupt
  control flow and are surfaced by the CLI with exit code 1.
"""

from __future__ import annotations


class CopilotAssetsError(Exception):
    """Base exception for copilot-assets."""


class RemoteFetchError(CopilotAssetsError):
    """A remote listing or download failed (HTTP, network or timeout)."""


class SecurityViolation(CopilotAssetsError):
    """Path traversal, oversized manifest or malformed checksum."""


class InvalidFilterError(CopilotAssetsError, ValueError):
    """An ``--only``/``--exclude`` value could not be turned into a filter."""


class InvalidTargetError(CopilotAssetsError, ValueError):
    """An unknown target tool name was requested."""


class ManifestFormatError(CopilotAssetsError):
    """The manifest file exists but cannot be parsed."""
