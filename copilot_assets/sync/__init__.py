"""Sync and drift detection — the engine that installs and audits assets.

This package provides:
- Sync: render templates per target tool and write them without clobbering local edits
- Dry run: the same decisions as planned operations, with no writes
- Manifest storage: the persisted record of what was installed and its checksums
- Verify: classify tracked assets as valid, modified or missing, optionally restoring
- Compliance: policy checks for CI, with drift severity chosen per invocation
"""
