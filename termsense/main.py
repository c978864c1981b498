from __future__ import annotations

import argparse
import asyncio
import functools
import json
import logging
import os
import sys
from typing import TextIO

from termsense.analyzer import ContextAnalyzer
from termsense.config import AppConfig, load_config
from termsense.log_setup import setup_logging
from termsense.session_manager import SessionManager, TerminalSession

logger = logging.getLogger(__name__)


def build_manager(config: AppConfig) -> SessionManager:
    """Build a session manager whose analyzers use the configured limits."""
    factory = functools.partial(
        ContextAnalyzer,
        max_buffer=config.analyzer.max_buffer,
        cooldown_ms=config.analyzer.cooldown_ms,
    )
    return SessionManager(analyzer_factory=factory)


async def _write_messages(outbox: asyncio.Queue, stream: TextIO) -> None:
    """Write outbound protocol messages as JSON lines until a None sentinel."""
    while True:
        msg = await outbox.get()
        if msg is None:
            return
        stream.write(json.dumps(msg, ensure_ascii=False) + "\n")
        stream.flush()


async def _run_session(session: TerminalSession, chunks, messages: TextIO) -> None:
    """Pump chunks from an async iterator through the session's worker.

    The worker and writer are always shut down and awaited, so messages
    already produced are written even when ``chunks`` raises.
    """
    inbox: asyncio.Queue = asyncio.Queue()
    outbox: asyncio.Queue = asyncio.Queue()
    worker_task = asyncio.create_task(session.worker.run(inbox, outbox))
    writer_task = asyncio.create_task(_write_messages(outbox, messages))

    try:
        async for chunk in chunks:
            await inbox.put({"type": "analyze", "data": chunk})
    finally:
        await inbox.put(None)
        await worker_task
        await outbox.put(None)
        await writer_task


async def analyze_stream(
    manager: SessionManager,
    source: TextIO,
    messages: TextIO,
) -> int:
    """Analyze text read line by line from ``source`` (normally stdin).

    Args:
        manager: Owner of the session created for this stream.
        source: Text stream to read until EOF.
        messages: Where protocol messages are written as JSON lines.

    Returns:
        Process exit code (always 0).
    """
    session = await manager.create_session("stdin")
    loop = asyncio.get_running_loop()

    async def _lines():
        while True:
            line = await loop.run_in_executor(None, source.readline)
            if not line:
                return
            yield line

    await _run_session(session, _lines(), messages)
    await manager.close_session(session.session_id)
    return 0


async def watch_command(
    manager: SessionManager,
    config: AppConfig,
    argv: list[str],
    echo: TextIO,
    messages: TextIO,
) -> int:
    """Run a command under a PTY, echo its output, and analyze it.

    Args:
        manager: Owner of the session created for the command.
        config: Supplies the poll interval and extra environment.
        argv: Command and its arguments.
        echo: Where the command's own output is mirrored.
        messages: Where protocol messages are written as JSON lines.

    Returns:
        The command's exit code, or 1 if it could not be determined.
    """
    command, *args = argv
    session = await manager.create_session(
        command, command=command, args=args, cwd=os.getcwd(), env=config.watch.env,
    )
    process = session.process
    interval = config.watch.poll_interval_ms / 1000.0

    async def _echoed():
        async for output in process.stream(interval):
            echo.write(output)
            echo.flush()
            yield output

    await _run_session(session, _echoed(), messages)
    exit_code = process.exit_code()
    await manager.close_session(session.session_id)
    logger.debug("Command %s exited with %s", command, exit_code)
    return exit_code if exit_code is not None else 1


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Watch terminal output and emit contextual suggestions as JSON lines",
    )
    parser.add_argument("--config", default=None,
                        help="Path to YAML config file (default: built-in defaults)")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug mode (verbose logging)")
    parser.add_argument("--trace", action="store_true",
                        help="Enable trace mode (writes trace file to debug/)")
    parser.add_argument("--verbose", action="store_true",
                        help="With --trace, also send trace output to terminal")
    parser.add_argument("command", nargs=argparse.REMAINDER,
                        help="Command to run and watch; reads stdin when omitted")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """Entry point: watch a command, or analyze stdin when none is given."""
    args = _parse_args(argv)
    config = load_config(args.config)
    config.debug.enabled = config.debug.enabled or args.debug
    config.debug.trace = config.debug.trace or args.trace
    config.debug.verbose = config.debug.verbose or args.verbose
    setup_logging(
        debug=config.debug.enabled, trace=config.debug.trace, verbose=config.debug.verbose
    )

    manager = build_manager(config)
    command = args.command
    if command and command[0] == "--":
        command = command[1:]
    try:
        if command:
            return await watch_command(manager, config, command, echo=sys.stdout, messages=sys.stderr)
        return await analyze_stream(manager, sys.stdin, messages=sys.stdout)
    finally:
        await manager.shutdown()


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
