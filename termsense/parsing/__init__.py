"""Terminal output parsing: ANSI stripping → pattern catalog → route extraction."""

from termsense.parsing.models import AISuggestion, TerminalContext  # noqa: F401

__all__ = ["AISuggestion", "TerminalContext"]
