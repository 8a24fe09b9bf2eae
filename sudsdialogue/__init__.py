"""Typed values, expressions, script graphs, saved state and asset settings for branching dialogue."""

__version__ = "0.1.0"

__all__ = [
    "editor_settings",
    "expression",
    "script",
    "state",
    "value",
]