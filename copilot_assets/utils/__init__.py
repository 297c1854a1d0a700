"""Shared helpers — checksums, template file discovery and git operations."""
