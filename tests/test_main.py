from __future__ import annotations

import asyncio
import io
import json
from unittest.mock import patch

import pytest

from termsense.config import AnalyzerConfig, AppConfig, ConfigError, WatchConfig
from termsense.main import _parse_args, _run_session, analyze_stream, build_manager, main, watch_command


def _messages(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


class TestParseArgs:
    def test_defaults(self):
        args = _parse_args([])
        assert args.config is None
        assert args.debug is False
        assert args.trace is False
        assert args.verbose is False
        assert args.command == []

    def test_flags_and_command(self):
        args = _parse_args(["--debug", "--config", "c.yaml", "npm", "run", "dev"])
        assert args.debug is True
        assert args.config == "c.yaml"
        assert args.command == ["npm", "run", "dev"]

    def test_command_options_left_alone(self):
        args = _parse_args(["vite", "--port", "3000"])
        assert args.command == ["vite", "--port", "3000"]


class TestBuildManager:
    @pytest.mark.asyncio
    async def test_analyzers_use_configured_buffer(self):
        manager = build_manager(AppConfig(analyzer=AnalyzerConfig(max_buffer=10)))
        session = await manager.create_session("s")
        session.analyzer.analyze_output("x" * 50)
        assert session.analyzer.buffer == "x" * 10


class TestRunSession:
    @pytest.mark.asyncio
    async def test_failing_source_still_stops_worker_and_writer(self):
        manager = build_manager(AppConfig())
        session = await manager.create_session("pty")
        out = io.StringIO()

        async def _chunks():
            yield "zsh: command not found: foo\n"
            raise OSError("read failed")

        with pytest.raises(OSError, match="read failed"):
            await _run_session(session, _chunks(), out)

        assert asyncio.all_tasks() == {asyncio.current_task()}
        assert [m["type"] for m in _messages(out)] == ["suggestion"]


class TestAnalyzeStream:
    @pytest.mark.asyncio
    async def test_emits_suggestion_and_url(self):
        manager = build_manager(AppConfig())
        source = io.StringIO("> node server.js\nServer running at http://localhost:3000\n")
        out = io.StringIO()

        code = await analyze_stream(manager, source, out)

        assert code == 0
        messages = _messages(out)
        assert [m["type"] for m in messages] == ["suggestion", "server-url"]
        assert messages[0]["payload"]["context"]["serverUrl"] == "http://localhost:3000"
        assert manager.list_sessions() == []

    @pytest.mark.asyncio
    async def test_quiet_for_plain_output(self):
        manager = build_manager(AppConfig())
        out = io.StringIO()
        await analyze_stream(manager, io.StringIO("all good\n"), out)
        assert out.getvalue() == ""


class TestWatchCommand:
    @pytest.mark.asyncio
    async def test_watches_command_output(self):
        config = AppConfig(watch=WatchConfig(poll_interval_ms=20))
        manager = build_manager(config)
        echo = io.StringIO()
        messages = io.StringIO()

        code = await watch_command(
            manager, config, ["sh", "-c", "echo 'zsh: command not found: foo'"], echo, messages,
        )

        assert code == 0
        assert "command not found: foo" in echo.getvalue()
        suggestion = _messages(messages)[0]
        assert suggestion["type"] == "suggestion"
        assert suggestion["payload"]["context"]["errorType"] == "Command not found: foo"

    @pytest.mark.asyncio
    async def test_returns_command_exit_code(self):
        config = AppConfig(watch=WatchConfig(poll_interval_ms=20))
        manager = build_manager(config)
        code = await watch_command(
            manager, config, ["sh", "-c", "exit 4"], io.StringIO(), io.StringIO(),
        )
        assert code == 4


class TestMain:
    @pytest.mark.asyncio
    async def test_reads_stdin_without_command(self, capsys):
        with patch("sys.stdin", io.StringIO("zsh: command not found: foo\n")):
            code = await main([])
        assert code == 0
        out = capsys.readouterr().out
        assert "Command not found: foo" in out

    @pytest.mark.asyncio
    async def test_invalid_config_file_raises(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("analyzer:\n  cooldown_ms: 0\n")
        with pytest.raises(ConfigError, match="cooldown_ms"):
            await main(["--config", str(config_file)])
