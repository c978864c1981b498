"""Shared data types for terminal output classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ContextType(Enum):
    """Primary classification of a matched stretch of terminal output.

    Only SERVER, ERROR and GIT are produced by the built-in pattern
    catalog; the remaining values are reserved for other producers.
    """

    SERVER = "server"
    ERROR = "error"
    GIT = "git"
    NPM = "npm"
    BUILD = "build"
    GENERAL = "general"


class ProjectType(Enum):
    """Best-effort guess at the toolchain that produced the output."""

    NODE = "node"
    PYTHON = "python"
    RUST = "rust"
    GO = "go"
    UNKNOWN = "unknown"


class ActionType(Enum):
    """How a host should treat an action when the user picks it.

    Values:
        COMMAND: Run ``command`` in the terminal (or, when it is unset,
            re-run whatever the context implies, e.g. the failed command).
        NAVIGATE: Move somewhere within the host UI.
        INFO: Display information only.
    """

    COMMAND = "command"
    NAVIGATE = "navigate"
    INFO = "info"


@dataclass
class TerminalContext:
    """Classification result of a pattern match.

    Optional fields are only populated when they make sense for ``type``:
    ``server_url`` and ``routes`` for servers, ``error_type`` for errors.
    """

    type: ContextType
    server_url: str | None = None
    routes: list[str] | None = None
    error_type: str | None = None
    project_type: ProjectType | None = None

    def to_dict(self) -> dict:
        """Serialize to the wire shape, omitting unset optional fields."""
        data: dict = {"type": self.type.value}
        if self.server_url is not None:
            data["serverUrl"] = self.server_url
        if self.routes is not None:
            data["routes"] = list(self.routes)
        if self.error_type is not None:
            data["errorType"] = self.error_type
        if self.project_type is not None:
            data["projectType"] = self.project_type.value
        return data


@dataclass
class AIAction:
    """A single follow-up the user may take on a suggestion."""

    id: str
    label: str
    icon: str
    type: ActionType
    command: str | None = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "label": self.label,
            "icon": self.icon,
            "type": self.type.value,
        }
        if self.command is not None:
            data["command"] = self.command
        return data


@dataclass
class AISuggestion:
    """The unit of output emitted by the analyzer.

    ``actions`` is in display priority order; the first one is primary.
    ``timestamp`` is the emission time in milliseconds on the analyzer's
    clock.
    """

    id: str
    title: str
    message: str
    timestamp: float
    context: TerminalContext
    actions: list[AIAction] = field(default_factory=list)
    dismissable: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "actions": [action.to_dict() for action in self.actions],
            "timestamp": self.timestamp,
            "context": self.context.to_dict(),
            "dismissable": self.dismissable,
        }
