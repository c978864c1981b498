from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from termsense.analyzer import ContextAnalyzer
from termsense.session_manager import SessionError, SessionManager


def _mock_process():
    mock_proc = MagicMock()
    mock_proc.spawn = AsyncMock()
    mock_proc.close = AsyncMock()
    mock_proc.is_alive.return_value = True
    return mock_proc


@pytest.fixture
def manager():
    return SessionManager()


class TestSessionManager:
    @pytest.mark.asyncio
    async def test_create_session_without_command(self, manager):
        session = await manager.create_session("stdin")
        assert session.session_id == 1
        assert session.name == "stdin"
        assert session.process is None
        assert session.status == "active"
        assert isinstance(session.analyzer, ContextAnalyzer)
        assert session.worker.analyzer is session.analyzer

    @pytest.mark.asyncio
    async def test_each_session_owns_its_analyzer(self, manager):
        first = await manager.create_session("a")
        second = await manager.create_session("b")
        assert first.session_id != second.session_id
        assert first.analyzer is not second.analyzer

    @pytest.mark.asyncio
    async def test_uses_analyzer_factory(self):
        analyzer = ContextAnalyzer(max_buffer=10)
        factory = MagicMock(return_value=analyzer)
        manager = SessionManager(analyzer_factory=factory)
        session = await manager.create_session("x")
        factory.assert_called_once_with()
        assert session.analyzer is analyzer

    @pytest.mark.asyncio
    async def test_create_session_spawns_command(self, manager):
        with patch("termsense.session_manager.WatchedProcess") as MockProc:
            MockProc.return_value = _mock_process()
            session = await manager.create_session(
                "dev", command="npm", args=["run", "dev"], cwd="/proj", env={"A": "1"}
            )
            MockProc.assert_called_once_with(command="npm", args=["run", "dev"], cwd="/proj", env={"A": "1"})
            session.process.spawn.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get(self, manager):
        session = await manager.create_session("a")
        assert manager.get(session.session_id) is session

    def test_get_unknown_raises(self, manager):
        with pytest.raises(SessionError, match="not found"):
            manager.get(99)

    @pytest.mark.asyncio
    async def test_list_sessions(self, manager):
        await manager.create_session("a")
        await manager.create_session("b")
        assert [s.name for s in manager.list_sessions()] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_close_session_closes_process(self, manager):
        with patch("termsense.session_manager.WatchedProcess") as MockProc:
            MockProc.return_value = _mock_process()
            session = await manager.create_session("dev", command="npm")
        closed = await manager.close_session(session.session_id)
        closed.process.close.assert_awaited_once()
        assert closed.status == "ended"
        assert manager.list_sessions() == []

    @pytest.mark.asyncio
    async def test_close_unknown_raises(self, manager):
        with pytest.raises(SessionError):
            await manager.close_session(5)

    @pytest.mark.asyncio
    async def test_shutdown_closes_all(self, manager):
        await manager.create_session("a")
        await manager.create_session("b")
        await manager.shutdown()
        assert manager.list_sessions() == []

    @pytest.mark.asyncio
    async def test_ids_not_reused_after_close(self, manager):
        first = await manager.create_session("a")
        await manager.close_session(first.session_id)
        second = await manager.create_session("b")
        assert second.session_id == 2
