"""Console observer for capturing browser console messages.

This module provides the ConsoleObserver class that appends every console
message a page reports to its session's console buffer. No filtering,
deduplication or truncation happens at capture time; all of that is left
to query time.
"""

import logging
from typing import Callable, List

from playwright.async_api import ConsoleMessage

from ..models.capture import ConsoleEntry

logger = logging.getLogger(__name__)


class ConsoleObserver:
    """Observer for console messages from a session's page."""

    def __init__(self, session):
        """Initialize console observer and attach it to the session's page.

        Args:
            session: BrowserSession whose console buffer receives entries
        """
        self.session = session
        self.page = session.page
        self._callbacks: List[Callable[[ConsoleEntry], None]] = []

        self._setup_listener()

    def _setup_listener(self) -> None:
        """Setup Playwright console event listener."""
        self.page.on("console", self._on_console_message)
        logger.debug(f"Console observer attached to session {self.session.session_id}")

    def add_callback(self, callback: Callable[[ConsoleEntry], None]) -> None:
        """Add callback to be called when console messages are captured.

        Args:
            callback: Function to call with each new ConsoleEntry
        """
        self._callbacks.append(callback)

    def _on_console_message(self, message: ConsoleMessage) -> None:
        """Handle console message event.

        Args:
            message: Playwright console message
        """
        try:
            entry = ConsoleEntry.from_playwright_message(message)
        except Exception as e:
            logger.error(f"Error processing console message: {e}")
            return

        self.session.console_logs.append(entry)

        for callback in self._callbacks:
            try:
                callback(entry)
            except Exception as e:
                logger.error(f"Error in console callback: {e}")

        logger.debug(f"Console {entry.level}: {entry.message[:100]}")

    def __repr__(self) -> str:
        return f"ConsoleObserver(session={self.session.session_id}, total={len(self.session.console_logs)})"
