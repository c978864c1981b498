"""Pattern catalog: regexes over clean terminal output mapped to suggestions.

Each :class:`OutputPattern` couples a compiled regex with the context type it
signals, an extractor that turns the match into a :class:`TerminalContext`,
and a builder that turns the context into an :class:`AISuggestion`.

:data:`CATALOG` is the fixed scan order used by the analyzer: server
patterns, then error patterns, then git patterns. The first entry that
matches wins; there is no attempt to find a more specific match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from termsense.parsing.models import (
    ActionType,
    AIAction,
    AISuggestion,
    ContextType,
    ProjectType,
    TerminalContext,
)

MAX_ERROR_LENGTH = 100

Extractor = Callable[["re.Match[str]", str], TerminalContext]
Builder = Callable[[TerminalContext, float], "AISuggestion | None"]


@dataclass(frozen=True)
class OutputPattern:
    """One catalog entry: regex, signalled type, extractor and builder."""

    pattern: re.Pattern
    type: ContextType
    extractor: Extractor
    builder: Builder


def _suggestion(
    prefix: str,
    now: float,
    title: str,
    message: str,
    context: TerminalContext,
    actions: list[AIAction],
) -> AISuggestion:
    return AISuggestion(
        id=f"{prefix}-{int(now)}",
        title=title,
        message=message,
        timestamp=now,
        context=context,
        actions=actions,
        dismissable=True,
    )


# --- Server patterns ---

# Optional "Server"/"App", a readiness verb, optional at/on, then a URL or
# a bare local host:port. Every whitespace run sits behind a literal word so
# a search over a long run of blanks stays linear.
_SERVER_READY_RE = re.compile(
    r"(?:\b(?:Server|App)[ \t]+)?\b(?:ready|running|listening|started)\b[ \t]*"
    r"(?:(?:at|on)[ \t]+)?"
    r"(https?://\S+|(?:localhost|127\.0\.0\.1|0\.0\.0\.0):\d+)",
    re.IGNORECASE,
)
_LISTENING_PORT_RE = re.compile(r"listening[ \t]+on[ \t]+port[ \t]+(\d+)", re.IGNORECASE)


def _extract_server_ready(match: re.Match, output: str) -> TerminalContext:
    url = match.group(1)
    if not url.lower().startswith("http"):
        url = f"http://{url}"
    return TerminalContext(
        type=ContextType.SERVER,
        server_url=url,
        project_type=ProjectType.NODE,
    )


def _extract_listening_port(match: re.Match, output: str) -> TerminalContext:
    return TerminalContext(
        type=ContextType.SERVER,
        server_url=f"http://localhost:{match.group(1)}",
        project_type=ProjectType.NODE,
    )


def build_server_suggestion(context: TerminalContext, now: float) -> AISuggestion:
    """Suggest next steps once a dev server reports it is up."""
    return _suggestion(
        "server",
        now,
        title="What's next?",
        message="Your server is running! Here are some things you can do:",
        context=context,
        actions=[
            AIAction(
                id="logs",
                label="Open logs",
                icon="terminal",
                type=ActionType.COMMAND,
                command="tail -f logs/*.log",
            ),
            AIAction(id="routes", label="View routes", icon="lightbulb", type=ActionType.INFO),
            AIAction(
                id="tests",
                label="Run tests",
                icon="refresh-cw",
                type=ActionType.COMMAND,
                command="npm test",
            ),
            AIAction(id="optimize", label="Optimize code", icon="sparkles", type=ActionType.NAVIGATE),
        ],
    )


# --- Error patterns ---

_ERROR_PREFIX_RE = re.compile(r"error:[ \t]*([^\r\n]+)", re.IGNORECASE)
# zsh: "zsh: command not found: foo"
_COMMAND_NOT_FOUND_RE = re.compile(r"command not found:[ \t]*([^\r\n]+)", re.IGNORECASE)
# bash/sh: "bash: foo: command not found", "bash: line 1: foo: command not found"
_SH_COMMAND_NOT_FOUND_RE = re.compile(
    r"^[\w./-]+:[ \t]+(?:line \d+:[ \t]+)?([^\s:]+):[ \t]*command not found",
    re.IGNORECASE | re.MULTILINE,
)
_NO_SUCH_FILE_RE = re.compile(r"no such file or directory", re.IGNORECASE)


def _extract_error(match: re.Match, output: str) -> TerminalContext:
    return TerminalContext(
        type=ContextType.ERROR,
        error_type=match.group(1).strip()[:MAX_ERROR_LENGTH],
    )


def _extract_command_not_found(match: re.Match, output: str) -> TerminalContext:
    command = match.group(1).strip()
    return TerminalContext(
        type=ContextType.ERROR,
        error_type=f"Command not found: {command}"[:MAX_ERROR_LENGTH],
    )


def _extract_no_such_file(match: re.Match, output: str) -> TerminalContext:
    return TerminalContext(type=ContextType.ERROR, error_type="File or directory not found")


def build_error_suggestion(context: TerminalContext, now: float) -> AISuggestion:
    """Offer to fix, look up, or retry a failed command."""
    return _suggestion(
        "error",
        now,
        title="Error Detected",
        message=context.error_type or "An error occurred",
        context=context,
        actions=[
            AIAction(id="fix", label="Ask AI to fix", icon="sparkles", type=ActionType.NAVIGATE),
            AIAction(id="search", label="Search docs", icon="search", type=ActionType.NAVIGATE),
            # No command: the host retries the last failed one
            AIAction(id="retry", label="Retry command", icon="refresh-cw", type=ActionType.COMMAND),
        ],
    )


def build_command_not_found_suggestion(context: TerminalContext, now: float) -> AISuggestion:
    return _suggestion(
        "cmd-not-found",
        now,
        title="Command Not Found",
        message=context.error_type or "Command not found",
        context=context,
        actions=[
            AIAction(id="fix", label="Suggest installation", icon="download", type=ActionType.NAVIGATE),
            AIAction(id="typo", label="Check for typo", icon="type", type=ActionType.NAVIGATE),
        ],
    )


def build_no_such_file_suggestion(context: TerminalContext, now: float) -> AISuggestion:
    return _suggestion(
        "no-file",
        now,
        title="File Not Found",
        message="The specified file or directory does not exist",
        context=context,
        actions=[
            AIAction(id="ls", label="List files", icon="list", type=ActionType.COMMAND, command="ls -la"),
            AIAction(id="create", label="Create file", icon="plus-square", type=ActionType.NAVIGATE),
        ],
    )


# --- Git patterns ---

_BRANCH_DIVERGED_RE = re.compile(r"Your branch is (ahead|behind)", re.IGNORECASE)


def _extract_git(match: re.Match, output: str) -> TerminalContext:
    return TerminalContext(type=ContextType.GIT)


def build_git_sync_suggestion(context: TerminalContext, now: float) -> AISuggestion:
    """Offer push/pull/status when the branch is out of sync with its remote.

    Ahead/behind counts are deliberately not parsed; the same three actions
    are offered either way.
    """
    return _suggestion(
        "git",
        now,
        title="Git Status",
        message="Your branch is out of sync with remote",
        context=context,
        actions=[
            AIAction(id="push", label="Push changes", icon="upload", type=ActionType.COMMAND, command="git push"),
            AIAction(id="pull", label="Pull changes", icon="download", type=ActionType.COMMAND, command="git pull"),
            AIAction(
                id="status",
                label="View status",
                icon="git-branch",
                type=ActionType.COMMAND,
                command="git status",
            ),
        ],
    )


SERVER_PATTERNS: tuple[OutputPattern, ...] = (
    OutputPattern(_SERVER_READY_RE, ContextType.SERVER, _extract_server_ready, build_server_suggestion),
    OutputPattern(_LISTENING_PORT_RE, ContextType.SERVER, _extract_listening_port, build_server_suggestion),
)

ERROR_PATTERNS: tuple[OutputPattern, ...] = (
    OutputPattern(_ERROR_PREFIX_RE, ContextType.ERROR, _extract_error, build_error_suggestion),
    OutputPattern(
        _COMMAND_NOT_FOUND_RE, ContextType.ERROR, _extract_command_not_found, build_command_not_found_suggestion
    ),
    OutputPattern(
        _SH_COMMAND_NOT_FOUND_RE, ContextType.ERROR, _extract_command_not_found, build_command_not_found_suggestion
    ),
    OutputPattern(_NO_SUCH_FILE_RE, ContextType.ERROR, _extract_no_such_file, build_no_such_file_suggestion),
)

GIT_PATTERNS: tuple[OutputPattern, ...] = (
    OutputPattern(_BRANCH_DIVERGED_RE, ContextType.GIT, _extract_git, build_git_sync_suggestion),
)

CATALOG: tuple[OutputPattern, ...] = SERVER_PATTERNS + ERROR_PATTERNS + GIT_PATTERNS
