"""Security layer — content limits, input validation, tracking-path resolution
and manifest validation.

Violations raise ``SecurityViolation`` immediately and abort the operation.
"""
