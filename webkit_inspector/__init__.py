"""WebKit Inspector - headless browser sessions with telemetry capture.

Starts isolated Playwright browser sessions, records their console
messages and network exchanges from the moment they are created, and
serves filtered, time-ordered views of what was captured.

Usage:
    from webkit_inspector import SessionRegistry, SessionOperations

    async with SessionRegistry() as registry:
        operations = SessionOperations(registry)
        await registry.create("main")
        await operations.navigate("main", "https://example.com")
        warnings = await operations.get_console_logs("main", "WARNING")
"""

__version__ = "1.0.0"

from .capture import (
    BrowserConfig,
    BrowserFactory,
    BrowserSession,
    SessionOperations,
    SessionRegistry,
)
from .errors import InspectorError
from .models import ConsoleEntry, NetworkEntry, NetworkPhase, SessionOptions

__all__ = [
    "__version__",
    "BrowserConfig",
    "BrowserFactory",
    "BrowserSession",
    "SessionOperations",
    "SessionRegistry",
    "InspectorError",
    "ConsoleEntry",
    "NetworkEntry",
    "NetworkPhase",
    "SessionOptions",
]
