"""Data model — asset categories, target tools, the manifest and operation results."""
