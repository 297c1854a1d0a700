"""copilot-assets — distribute and keep in sync AI assistant assets across repositories."""

__version__ = "1.0.0"
