from __future__ import annotations

import asyncio
import logging
import os
import shlex
from typing import AsyncIterator

import pexpect

from termsense.log_setup import TRACE

logger = logging.getLogger(__name__)

_READ_SIZE = 4096


class WatchedProcess:
    """A command run under a PTY so its output can be analyzed as it appears.

    The PTY makes the command behave as it would in a real terminal, colors
    and all, so the analyzer sees the same escape sequences a user would.
    """

    def __init__(self, command: str, args: list[str], cwd: str, env: dict[str, str] | None = None) -> None:
        """Prepare the command without starting it.

        Args:
            command: Executable to run (e.g. "npm").
            args: Arguments passed to the executable.
            cwd: Working directory for the command.
            env: Variables layered over the current environment. A leading
                ``~`` in a value becomes the user's home directory.
        """
        self.argv = [command, *args]
        self.cwd = cwd
        self.env = dict(os.environ)
        for key, value in (env or {}).items():
            self.env[key] = os.path.expanduser(value)
        self._child: pexpect.spawn | None = None

    @property
    def pid(self) -> int | None:
        return self._child.pid if self._child is not None else None

    @property
    def closed(self) -> bool:
        """True before spawning and once the PTY has been released."""
        return self._child is None or self._child.closed

    async def spawn(self) -> None:
        """Start the command on a background thread."""
        command, *args = self.argv
        loop = asyncio.get_running_loop()
        self._child = await loop.run_in_executor(
            None,
            lambda: pexpect.spawn(
                command,
                args,
                cwd=self.cwd,
                env=self.env,
                encoding="utf-8",
                codec_errors="replace",
                maxread=_READ_SIZE,
            ),
        )
        logger.debug("Watching pid=%d: %s (cwd=%s)", self._child.pid, shlex.join(self.argv), self.cwd)

    def is_alive(self) -> bool:
        return self._child is not None and self._child.isalive()

    def read_available(self) -> str:
        """Return everything the command has written since the last read.

        Never blocks: an empty string means nothing is pending right now
        (or the command was never started).
        """
        if self._child is None:
            return ""
        chunks = []
        while True:
            try:
                chunk = self._child.read_nonblocking(size=_READ_SIZE, timeout=0)
            except (pexpect.TIMEOUT, pexpect.EOF):
                break
            logger.log(TRACE, "pid=%d read %d chars", self._child.pid, len(chunk))
            chunks.append(chunk)
        return "".join(chunks)

    async def stream(self, poll_interval: float) -> AsyncIterator[str]:
        """Yield output as it arrives until the command exits.

        Args:
            poll_interval: Seconds to wait when the PTY has nothing to read.
        """
        while True:
            # Sampled before reading so output written right before exit is still drained
            alive = self.is_alive()
            output = self.read_available()
            if output:
                yield output
            elif not alive:
                return
            else:
                await asyncio.sleep(poll_interval)

    async def close(self) -> None:
        """Release the PTY, killing the command first if it is still running."""
        if self.closed:
            return
        logger.debug("Closing pid=%d (alive=%s)", self._child.pid, self._child.isalive())
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._child.close, True)

    def exit_code(self) -> int | None:
        """Return the exit status, or the signal number if a signal ended it.

        None while the command is running or before it was started.
        """
        if self._child is None:
            return None
        if self._child.exitstatus is not None:
            return self._child.exitstatus
        return self._child.signalstatus
