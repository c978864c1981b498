"""Streaming terminal-output classifier that turns shell output into suggestions."""
