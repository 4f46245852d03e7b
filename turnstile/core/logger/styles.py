"""
Log Style Constants.

Shared separators and symbols for consistent console output.
"""


class LogStyle:
    """Unified logging style constants for consistent visual hierarchy."""

    # Level 1: Session headers
    HEAVY = "━" * 72

    # Level 2: Subsections / Separators
    LIGHT = "─" * 72

    # Symbols
    ARROW = "»"
    WARNING = "⚠"
    SUCCESS = "✓"

    # Indentation
    INDENT = "  "
