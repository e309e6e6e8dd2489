"""Browser session and telemetry capture for WebKit Inspector.

This package owns the lifecycle of browser sessions and the capture of
their console and network activity using Playwright.

Main Components:
- Browser Factory: launches one isolated browser, context and page per session
- Session: record owning the engine handles and the log buffers
- Console Observer: appends console messages to the session's buffer
- Network Observer: correlates requests and responses into network entries
- Session Registry: create, look up, close and sweep sessions
- Session Operations: navigation, scripts, inspection, screenshots, metrics, logs
- Query: level/substring filtering and chronological ordering

Usage:
    from webkit_inspector.capture import SessionRegistry, SessionOperations

    async with SessionRegistry() as registry:
        operations = SessionOperations(registry)
        await registry.create("main")
        await operations.navigate("main", "https://example.com")
        errors = await operations.get_console_logs("main", "ERROR")
"""

__all__ = [
    # Main components
    "BrowserFactory",
    "BrowserConfig",
    "BrowserEngineType",
    "LaunchedBrowser",
    "BrowserSession",
    "SessionRegistry",
    "SessionOperations",

    # Observers
    "ConsoleObserver",
    "NetworkObserver",

    # Query
    "ALL_LEVELS",
    "filter_console_logs",
    "filter_by_level",
    "filter_by_text",
    "sort_by_timestamp",
]

from .browser_factory import (
    BrowserFactory,
    BrowserConfig,
    BrowserEngineType,
    LaunchedBrowser,
)
from .session import BrowserSession
from .console_observer import ConsoleObserver
from .network_observer import NetworkObserver
from .registry import SessionRegistry
from .operations import SessionOperations
from .query import (
    ALL_LEVELS,
    filter_console_logs,
    filter_by_level,
    filter_by_text,
    sort_by_timestamp,
)
