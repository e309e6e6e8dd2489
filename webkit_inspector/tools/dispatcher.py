"""Named-tool dispatch over the session manager.

The ToolDispatcher maps tool names to session operations, validates the
arguments of each call and turns every outcome into a ToolResult. It never
raises: operation failures, invalid arguments, unknown tools and
unexpected errors all come back as structured failures.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type

from pydantic import ValidationError

from .schemas import (
    ConsoleLogArguments,
    ExecuteScriptArguments,
    InspectElementArguments,
    NavigateArguments,
    NoArguments,
    SessionArguments,
    StartSessionArguments,
    ToolArguments,
    ToolResult,
)
from ..capture.browser_factory import BrowserFactory
from ..capture.operations import SessionOperations
from ..capture.query import filter_by_text
from ..capture.registry import SessionRegistry
from ..config import InspectorConfig
from ..errors import InspectorError, PageQueryFailed

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any], Awaitable[Any]]


class ToolDispatcher:
    """Dispatches named tool calls to a registry and its operations."""

    def __init__(self, registry: SessionRegistry, operations: Optional[SessionOperations] = None):
        """Initialize dispatcher.

        Args:
            registry: Registry holding the sessions
            operations: Operations bound to the same registry
        """
        self.registry = registry
        self.operations = operations or SessionOperations(registry)
        self._tools: Dict[str, Tuple[Type[ToolArguments], ToolHandler]] = {
            "start_session": (StartSessionArguments, self._start_session),
            "close_session": (SessionArguments, self._close_session),
            "list_sessions": (NoArguments, self._list_sessions),
            "navigate": (NavigateArguments, self._navigate),
            "get_page_info": (SessionArguments, self._get_page_info),
            "get_console_logs": (ConsoleLogArguments, self._get_console_logs),
            "get_network_logs": (SessionArguments, self._get_network_logs),
            "clear_console_logs": (SessionArguments, self._clear_console_logs),
            "clear_network_logs": (SessionArguments, self._clear_network_logs),
            "get_performance_metrics": (SessionArguments, self._get_performance_metrics),
            "execute_script": (ExecuteScriptArguments, self._execute_script),
            "take_screenshot": (SessionArguments, self._take_screenshot),
            "inspect_element": (InspectElementArguments, self._inspect_element),
        }

    @classmethod
    def from_config(cls, config: InspectorConfig) -> "ToolDispatcher":
        """Build a registry, operations and dispatcher from configuration."""
        registry = SessionRegistry(BrowserFactory(config.to_browser_config()))
        operations = SessionOperations(
            registry,
            screenshot_dir=config.screenshot_dir,
            navigation_timeout_ms=config.navigation_timeout_ms,
            selector_timeout_ms=config.selector_timeout_ms,
            inspect_text_limit=config.inspect_text_limit,
        )
        return cls(registry, operations)

    def tool_names(self) -> List[str]:
        return list(self._tools.keys())

    async def call(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        """Run one tool call.

        Args:
            name: Tool name
            arguments: Raw arguments as received from the caller

        Returns:
            ToolResult carrying either JSON-ready data or an error
        """
        if name not in self._tools:
            return ToolResult.fail("UnknownTool", f"Unknown tool: {name}")

        schema, handler = self._tools[name]

        try:
            parsed = schema.model_validate(arguments or {})
        except ValidationError as e:
            return ToolResult.fail("InvalidArguments", f"Invalid arguments for {name}: {e}")

        try:
            return ToolResult.ok(await handler(parsed))
        except InspectorError as e:
            return ToolResult.fail(e.kind, e.message, e.session_id)
        except Exception as e:
            logger.exception(f"Unexpected error in tool {name}")
            return ToolResult.fail("InternalError", f"{name} failed: {e}")

    async def _start_session(self, args: StartSessionArguments):
        session = await self.registry.create(args.session_id, args.options)
        return session.describe().to_dict()

    async def _close_session(self, args: SessionArguments):
        await self.registry.close(args.session_id)
        return {"sessionId": args.session_id, "closed": True}

    async def _list_sessions(self, args: NoArguments):
        return self.registry.list()

    async def _navigate(self, args: NavigateArguments):
        """Navigate, then report where the page ended up.

        A completed navigation is reported as a success even if the page
        info cannot be read afterwards; ``url`` and ``title`` are then null.
        """
        await self.operations.navigate(args.session_id, args.url)
        try:
            return (await self.operations.get_page_info(args.session_id)).to_dict()
        except PageQueryFailed as e:
            logger.warning(f"Session {args.session_id} navigated but page info is unavailable: {e.message}")
            return {"url": None, "title": None}

    async def _get_page_info(self, args: SessionArguments):
        return (await self.operations.get_page_info(args.session_id)).to_dict()

    async def _get_console_logs(self, args: ConsoleLogArguments):
        entries = await self.operations.get_console_logs(args.session_id, args.log_level)
        entries = filter_by_text(entries, args.text_filter, ignore_case=args.ignore_case)
        return [entry.to_dict() for entry in entries]

    async def _get_network_logs(self, args: SessionArguments):
        entries = await self.operations.get_network_logs(args.session_id)
        return [entry.to_dict() for entry in entries]

    async def _clear_console_logs(self, args: SessionArguments):
        await self.operations.clear_console_logs(args.session_id)
        return {"sessionId": args.session_id, "cleared": "console"}

    async def _clear_network_logs(self, args: SessionArguments):
        await self.operations.clear_network_logs(args.session_id)
        return {"sessionId": args.session_id, "cleared": "network"}

    async def _get_performance_metrics(self, args: SessionArguments):
        return (await self.operations.get_performance_metrics(args.session_id)).to_dict()

    async def _execute_script(self, args: ExecuteScriptArguments):
        return await self.operations.execute_script(args.session_id, args.script, args.args)

    async def _take_screenshot(self, args: SessionArguments):
        return (await self.operations.take_screenshot(args.session_id)).to_dict()

    async def _inspect_element(self, args: InspectElementArguments):
        return (await self.operations.inspect_element(args.session_id, args.selector)).to_dict()
