"""Unit tests for the named-tool dispatcher."""

import base64

import pytest
from unittest.mock import patch

from webkit_inspector.config import InspectorConfig
from webkit_inspector.models.capture import ConsoleEntry
from webkit_inspector.tools.dispatcher import ToolDispatcher
from webkit_inspector.tools.schemas import ConsoleLogArguments, ToolResult

from tests.helpers import make_console_message, make_request, make_response, page_handlers


@pytest.fixture
def dispatcher(registry, operations):
    return ToolDispatcher(registry, operations)


class TestToolResult:
    def test_ok_has_no_error_key(self):
        assert ToolResult.ok({"a": 1}).to_dict() == {"success": True, "data": {"a": 1}}

    def test_fail_has_no_data_key(self):
        result = ToolResult.fail("SessionNotFound", "Session x not found", "x").to_dict()

        assert result == {
            "success": False,
            "error": {"kind": "SessionNotFound", "message": "Session x not found", "sessionId": "x"},
        }


class TestConsoleLogArguments:
    def test_level_uppercased(self):
        args = ConsoleLogArguments.model_validate({"sessionId": "a", "logLevel": " warn "})
        assert args.log_level == "WARN"

    def test_empty_level_rejected(self):
        with pytest.raises(ValueError):
            ConsoleLogArguments.model_validate({"session_id": "a", "log_level": "  "})

    def test_level_description_names_warning(self):
        description = ConsoleLogArguments.model_fields["log_level"].description

        assert "WARNING" in description
        assert "WARN," not in description


class TestDispatch:
    """Tests for argument handling and error mapping."""

    def test_tool_names(self, dispatcher):
        assert set(dispatcher.tool_names()) == {
            "start_session", "close_session", "list_sessions", "navigate",
            "get_page_info", "get_console_logs", "get_network_logs",
            "clear_console_logs", "clear_network_logs", "get_performance_metrics",
            "execute_script", "take_screenshot", "inspect_element",
        }

    @pytest.mark.asyncio
    async def test_unknown_tool(self, dispatcher):
        result = await dispatcher.call("launch_rocket", {})

        assert result.success is False
        assert result.error.kind == "UnknownTool"

    @pytest.mark.asyncio
    async def test_missing_argument(self, dispatcher):
        result = await dispatcher.call("navigate", {"sessionId": "a"})

        assert result.success is False
        assert result.error.kind == "InvalidArguments"

    @pytest.mark.asyncio
    async def test_extra_argument_rejected(self, dispatcher):
        result = await dispatcher.call("list_sessions", {"verbose": True})

        assert result.error.kind == "InvalidArguments"

    @pytest.mark.asyncio
    async def test_session_not_found_is_structured(self, dispatcher):
        result = await dispatcher.call("get_console_logs", {"sessionId": "ghost"})

        assert result.to_dict() == {
            "success": False,
            "error": {"kind": "SessionNotFound", "message": "Session ghost not found", "sessionId": "ghost"},
        }

    @pytest.mark.asyncio
    async def test_unexpected_error_is_internal(self, dispatcher):
        with patch.object(dispatcher.registry, "list", side_effect=KeyError("boom")):
            result = await dispatcher.call("list_sessions")

        assert result.success is False
        assert result.error.kind == "InternalError"


class TestSessionTools:
    """End-to-end tool flows against mocked browsers."""

    @pytest.mark.asyncio
    async def test_start_list_close(self, dispatcher):
        started = await dispatcher.call("start_session", {
            "sessionId": "a",
            "options": {"enableProfiling": False},
        })

        assert started.success is True
        assert started.data["sessionId"] == "a"
        assert started.data["options"]["enableProfiling"] is False
        assert (await dispatcher.call("list_sessions")).data == ["a"]

        closed = await dispatcher.call("close_session", {"sessionId": "a"})

        assert closed.data == {"sessionId": "a", "closed": True}
        assert (await dispatcher.call("list_sessions")).data == []

    @pytest.mark.asyncio
    async def test_duplicate_start(self, dispatcher):
        await dispatcher.call("start_session", {"sessionId": "a"})

        result = await dispatcher.call("start_session", {"sessionId": "a"})

        assert result.error.kind == "SessionAlreadyExists"
        assert result.error.message == "Session a already exists"

    @pytest.mark.asyncio
    async def test_navigate_returns_page_info(self, dispatcher, registry):
        await dispatcher.call("start_session", {"session_id": "a"})
        page = registry.get("a").page
        page.url = "https://example.com/"
        page.title.return_value = "Example Domain"

        result = await dispatcher.call("navigate", {"sessionId": "a", "url": "https://example.com"})

        assert result.data == {"url": "https://example.com/", "title": "Example Domain"}

    @pytest.mark.asyncio
    async def test_navigate_succeeds_when_page_info_unreadable(self, dispatcher, registry):
        await dispatcher.call("start_session", {"sessionId": "a"})
        page = registry.get("a").page
        page.title.side_effect = RuntimeError("Target closed")

        result = await dispatcher.call("navigate", {"sessionId": "a", "url": "https://example.com"})

        assert result.success is True
        assert result.data == {"url": None, "title": None}
        page.goto.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_navigation_failure(self, dispatcher, registry):
        await dispatcher.call("start_session", {"sessionId": "a"})
        registry.get("a").page.goto.side_effect = RuntimeError("net::ERR_CONNECTION_REFUSED")

        result = await dispatcher.call("navigate", {"sessionId": "a", "url": "http://localhost:1"})

        assert result.error.kind == "NavigationFailed"
        assert "ERR_CONNECTION_REFUSED" in result.error.message
        assert "a" in registry

    @pytest.mark.asyncio
    async def test_console_logs_filtered(self, dispatcher, registry):
        await dispatcher.call("start_session", {"sessionId": "a"})
        handler = page_handlers(registry.get("a").page)["console"]
        handler(make_console_message("error", "Failed to load resource"))
        handler(make_console_message("error", "Uncaught TypeError"))
        handler(make_console_message("log", "failed attempt, retrying"))

        result = await dispatcher.call("get_console_logs", {
            "sessionId": "a",
            "logLevel": "error",
            "textFilter": "FAILED",
            "ignoreCase": True,
        })

        assert [entry["message"] for entry in result.data] == ["Failed to load resource"]
        assert result.data[0]["level"] == "ERROR"

    @pytest.mark.asyncio
    async def test_console_logs_sorted(self, dispatcher, registry):
        await dispatcher.call("start_session", {"sessionId": "a"})
        session = registry.get("a")
        session.console_logs.append(ConsoleEntry(level="LOG", message="b", timestamp=20))
        session.console_logs.append(ConsoleEntry(level="LOG", message="a", timestamp=10))

        result = await dispatcher.call("get_console_logs", {"sessionId": "a"})

        assert [entry["message"] for entry in result.data] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_network_logs_and_clear(self, dispatcher, registry):
        await dispatcher.call("start_session", {"sessionId": "a"})
        handlers = page_handlers(registry.get("a").page)
        request = make_request(url="https://example.com/")
        handlers["request"](request)
        handlers["response"](make_response(request, status=200))

        logs = await dispatcher.call("get_network_logs", {"sessionId": "a"})

        assert len(logs.data) == 1
        assert logs.data[0]["method"] == "Network.responseReceived"
        assert logs.data[0]["status"] == 200

        cleared = await dispatcher.call("clear_network_logs", {"sessionId": "a"})

        assert cleared.data == {"sessionId": "a", "cleared": "network"}
        assert (await dispatcher.call("get_network_logs", {"sessionId": "a"})).data == []

    @pytest.mark.asyncio
    async def test_clear_console_logs(self, dispatcher, registry):
        await dispatcher.call("start_session", {"sessionId": "a"})
        page_handlers(registry.get("a").page)["console"](make_console_message("log", "x"))

        cleared = await dispatcher.call("clear_console_logs", {"sessionId": "a"})

        assert cleared.data == {"sessionId": "a", "cleared": "console"}
        assert (await dispatcher.call("get_console_logs", {"sessionId": "a"})).data == []

    @pytest.mark.asyncio
    async def test_execute_script(self, dispatcher, registry):
        await dispatcher.call("start_session", {"sessionId": "a"})
        registry.get("a").page.evaluate.return_value = {"sum": 3}

        result = await dispatcher.call("execute_script", {
            "sessionId": "a",
            "script": "return {sum: args[0] + args[1]}",
            "args": [1, 2],
        })

        assert result.data == {"sum": 3}

    @pytest.mark.asyncio
    async def test_take_screenshot(self, dispatcher, registry):
        await dispatcher.call("start_session", {"sessionId": "a"})
        registry.get("a").page.screenshot.return_value = b"png-bytes"

        result = await dispatcher.call("take_screenshot", {"sessionId": "a"})

        assert base64.b64decode(result.data["imageBase64"]) == b"png-bytes"
        assert "screenshot-a-" in result.data["path"]

    @pytest.mark.asyncio
    async def test_inspect_element_not_found(self, dispatcher, registry):
        await dispatcher.call("start_session", {"sessionId": "a"})
        registry.get("a").page.wait_for_selector.return_value = None

        result = await dispatcher.call("inspect_element", {"sessionId": "a", "selector": "#nope"})

        assert result.error.kind == "ElementNotFound"

    @pytest.mark.asyncio
    async def test_performance_metrics(self, dispatcher, registry):
        await dispatcher.call("start_session", {"sessionId": "a"})
        registry.get("a").page.evaluate.return_value = {"navigationStart": 1000, "firstPaint": None}

        result = await dispatcher.call("get_performance_metrics", {"sessionId": "a"})

        assert result.data["navigationStart"] == 1000
        assert result.data["firstPaint"] is None


def test_from_config_wires_settings(tmp_path):
    config = InspectorConfig(
        engine="chromium",
        screenshot_dir=tmp_path,
        navigation_timeout_ms=1234,
        inspect_text_limit=42,
    )

    dispatcher = ToolDispatcher.from_config(config)

    assert dispatcher.registry.factory.config.engine == "chromium"
    assert dispatcher.operations.registry is dispatcher.registry
    assert dispatcher.operations.screenshot_dir == tmp_path
    assert dispatcher.operations.navigation_timeout_ms == 1234
    assert dispatcher.operations.inspect_text_limit == 42
