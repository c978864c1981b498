from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from termsense.analyzer import ContextAnalyzer
from termsense.process import WatchedProcess
from termsense.worker import AnalysisWorker

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Raised when a session operation fails."""

    pass


@dataclass
class TerminalSession:
    """One output stream with the analyzer and worker that own its state."""

    session_id: int
    name: str
    analyzer: ContextAnalyzer
    worker: AnalysisWorker
    process: WatchedProcess | None = None
    status: str = "active"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SessionManager:
    """Create and own one analyzer per terminal session.

    Analyzers are never shared: interleaving two streams in one rolling
    buffer would let text from one session complete a match in another.
    """

    def __init__(self, analyzer_factory: Callable[[], ContextAnalyzer] = ContextAnalyzer) -> None:
        """Initialize the session manager.

        Args:
            analyzer_factory: Builds a fresh analyzer for every new
                session, typically a partial over the configured buffer
                size and cooldown.
        """
        self._analyzer_factory = analyzer_factory
        self._sessions: dict[int, TerminalSession] = {}
        self._next_id = 1

    async def create_session(
        self,
        name: str,
        command: str | None = None,
        args: list[str] | None = None,
        cwd: str = ".",
        env: dict[str, str] | None = None,
    ) -> TerminalSession:
        """Register a session, optionally spawning a command to watch.

        Args:
            name: Human-readable session label.
            command: Executable to run under a PTY. When None the caller
                feeds output itself (e.g. from stdin).
            args: Arguments passed to ``command``.
            cwd: Working directory for ``command``.
            env: Extra environment variables for ``command``.

        Returns:
            The newly created TerminalSession.
        """
        session_id = self._next_id
        self._next_id += 1

        process = None
        if command is not None:
            process = WatchedProcess(command=command, args=args or [], cwd=cwd, env=env)
            await process.spawn()

        analyzer = self._analyzer_factory()
        session = TerminalSession(
            session_id=session_id,
            name=name,
            analyzer=analyzer,
            worker=AnalysisWorker(analyzer),
            process=process,
        )
        self._sessions[session_id] = session
        logger.debug("Session #%d created name=%s command=%s", session_id, name, command)
        return session

    def get(self, session_id: int) -> TerminalSession:
        """Look up a live session.

        Raises:
            SessionError: If no session has that id.
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionError(f"Session #{session_id} not found")
        return session

    def list_sessions(self) -> list[TerminalSession]:
        return list(self._sessions.values())

    async def close_session(self, session_id: int) -> TerminalSession:
        """Terminate a session's process (if any) and forget the session.

        Raises:
            SessionError: If no session has that id.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionError(f"Session #{session_id} not found")
        if session.process is not None:
            await session.process.close()
        session.status = "ended"
        logger.debug("Session #%d closed", session_id)
        return session

    async def shutdown(self) -> None:
        """Close every remaining session."""
        for session_id in list(self._sessions):
            await self.close_session(session_id)
