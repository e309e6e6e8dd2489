"""Unit tests for SessionRegistry lifecycle."""

import asyncio

import pytest
from unittest.mock import AsyncMock, patch

from webkit_inspector.capture.console_observer import ConsoleObserver
from webkit_inspector.capture.network_observer import NetworkObserver
from webkit_inspector.capture.registry import SessionRegistry
from webkit_inspector.errors import (
    SessionAlreadyExists,
    SessionCloseFailed,
    SessionCreationFailed,
    SessionNotFound,
)
from webkit_inspector.models.capture import SessionOptions

from tests.helpers import make_console_message, make_launched_browser, page_handlers


class TestCreate:
    """Tests for starting sessions."""

    @pytest.mark.asyncio
    async def test_create_registers_session(self, registry, mock_factory):
        session = await registry.create("a")

        assert registry.list() == ["a"]
        assert registry.get("a") is session
        assert session.console_logs == []
        assert session.network_logs == []
        mock_factory.launch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_attaches_capture_before_returning(self, registry):
        session = await registry.create("a")

        assert isinstance(session.console_observer, ConsoleObserver)
        assert isinstance(session.network_observer, NetworkObserver)
        assert set(page_handlers(session.page)) == {"console", "request", "response", "requestfailed"}

    @pytest.mark.asyncio
    async def test_create_records_options(self, registry):
        options = SessionOptions(enable_profiling=False)

        session = await registry.create("a", options)

        assert session.options.enable_profiling is False
        assert session.describe().options.enable_profiling is False

    @pytest.mark.asyncio
    async def test_default_options(self, registry):
        session = await registry.create("a")
        assert session.options == SessionOptions()

    @pytest.mark.asyncio
    async def test_duplicate_id_rejected(self, registry, mock_factory):
        first = await registry.create("a")

        with pytest.raises(SessionAlreadyExists) as exc_info:
            await registry.create("a")

        assert exc_info.value.kind == "SessionAlreadyExists"
        assert exc_info.value.session_id == "a"
        assert registry.get("a") is first
        assert mock_factory.launch.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_create_with_same_id(self, registry, mock_factory):
        gate = asyncio.Event()

        async def slow_launch():
            await gate.wait()
            return make_launched_browser()

        mock_factory.launch.side_effect = slow_launch

        first = asyncio.create_task(registry.create("a"))
        await asyncio.sleep(0)

        with pytest.raises(SessionAlreadyExists):
            await registry.create("a")

        gate.set()
        session = await first

        assert registry.list() == ["a"]
        assert registry.get("a") is session

    @pytest.mark.asyncio
    async def test_launch_failure_registers_nothing(self, registry, mock_factory):
        mock_factory.launch.side_effect = RuntimeError("engine not installed")

        with pytest.raises(SessionCreationFailed, match="engine not installed") as exc_info:
            await registry.create("a")

        assert exc_info.value.session_id == "a"
        assert registry.list() == []

    @pytest.mark.asyncio
    async def test_id_reusable_after_failed_create(self, registry, mock_factory):
        mock_factory.launch.side_effect = [RuntimeError("boom"), make_launched_browser()]

        with pytest.raises(SessionCreationFailed):
            await registry.create("a")

        session = await registry.create("a")
        assert registry.get("a") is session

    @pytest.mark.asyncio
    async def test_attach_failure_releases_browser(self, registry, mock_factory):
        launched = make_launched_browser()
        mock_factory.launch.side_effect = None
        mock_factory.launch.return_value = launched

        with patch(
            'webkit_inspector.capture.registry.NetworkObserver',
            side_effect=RuntimeError("listener failed")
        ):
            with pytest.raises(SessionCreationFailed):
                await registry.create("a")

        launched.browser.close.assert_awaited_once()
        assert registry.list() == []

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, registry):
        a = await registry.create("a")
        b = await registry.create("b")

        page_handlers(a.page)["console"](make_console_message("log", "only in a"))

        assert [entry.message for entry in a.console_logs] == ["only in a"]
        assert b.console_logs == []
        assert a.browser is not b.browser


class TestLookup:
    """Tests for resolving sessions."""

    def test_get_missing_returns_none(self, registry):
        assert registry.get("missing") is None

    def test_require_missing_raises(self, registry):
        with pytest.raises(SessionNotFound) as exc_info:
            registry.require("missing")

        assert exc_info.value.message == "Session missing not found"

    @pytest.mark.asyncio
    async def test_contains_and_len(self, registry):
        await registry.create("a")

        assert "a" in registry
        assert "b" not in registry
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_list_is_snapshot(self, registry):
        await registry.create("a")
        ids = registry.list()

        await registry.create("b")

        assert ids == ["a"]
        assert sorted(registry.list()) == ["a", "b"]


class TestClose:
    """Tests for closing sessions."""

    @pytest.mark.asyncio
    async def test_close_releases_browser_and_removes(self, registry):
        session = await registry.create("a")

        await registry.close("a")

        session.browser.close.assert_awaited_once()
        assert registry.get("a") is None
        assert registry.list() == []

    @pytest.mark.asyncio
    async def test_close_missing_raises(self, registry):
        with pytest.raises(SessionNotFound):
            await registry.close("missing")

    @pytest.mark.asyncio
    async def test_close_twice_raises_not_found(self, registry):
        await registry.create("a")
        await registry.close("a")

        with pytest.raises(SessionNotFound):
            await registry.close("a")

    @pytest.mark.asyncio
    async def test_close_failure_keeps_session(self, registry):
        session = await registry.create("a")
        session.browser.close.side_effect = RuntimeError("browser hung")

        with pytest.raises(SessionCloseFailed, match="browser hung"):
            await registry.close("a")

        assert registry.get("a") is session

        session.browser.close.side_effect = None
        await registry.close("a")
        assert registry.get("a") is None

    @pytest.mark.asyncio
    async def test_id_reusable_after_close(self, registry):
        first = await registry.create("a")
        await registry.close("a")

        second = await registry.create("a")

        assert second is not first
        assert second.console_logs == []


class TestCloseAll:
    """Tests for sweeping every session."""

    @pytest.mark.asyncio
    async def test_close_all_empties_registry(self, registry):
        sessions = [await registry.create(name) for name in ("a", "b", "c")]

        failed = await registry.close_all()

        assert failed == []
        assert registry.list() == []
        for session in sessions:
            session.browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_all_continues_past_failures(self, registry):
        await registry.create("a")
        b = await registry.create("b")
        await registry.create("c")
        b.browser.close.side_effect = RuntimeError("stuck")

        failed = await registry.close_all()

        assert failed == ["b"]
        assert registry.list() == ["b"]

    @pytest.mark.asyncio
    async def test_close_all_on_empty_registry(self, registry):
        assert await registry.close_all() == []

    @pytest.mark.asyncio
    async def test_shutdown_stops_driver(self, registry, mock_factory):
        await registry.create("a")

        failed = await registry.shutdown()

        assert failed == []
        assert registry.list() == []
        mock_factory.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_async_context_manager_shuts_down(self, mock_factory):
        async with SessionRegistry(mock_factory) as registry:
            session = await registry.create("a")

        session.browser.close.assert_awaited_once()
        mock_factory.stop.assert_awaited_once()
        assert registry.list() == []

    @pytest.mark.asyncio
    async def test_shutdown_tolerates_driver_stop_failure(self, registry, mock_factory):
        mock_factory.stop = AsyncMock(side_effect=RuntimeError("driver gone"))

        assert await registry.shutdown() == []
