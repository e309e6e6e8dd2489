"""Session record owning one browser instance and its log buffers."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from playwright.async_api import Browser, BrowserContext, Page

from ..models.capture import (
    ConsoleEntry,
    NetworkEntry,
    SessionOptions,
    SessionDescriptor,
)

logger = logging.getLogger(__name__)


class BrowserSession:
    """One isolated browser instance with its accumulated telemetry.

    The session exclusively owns its browser process, context and page.
    ``console_logs`` and ``network_logs`` grow in arrival order and are only
    ever emptied by replacing them with new lists, so copies handed out
    earlier keep their contents.
    """

    def __init__(
        self,
        session_id: str,
        browser: Browser,
        context: BrowserContext,
        page: Page,
        options: Optional[SessionOptions] = None,
    ):
        self.session_id = session_id
        self.browser = browser
        self.context = context
        self.page = page
        self.options = options or SessionOptions()
        self.created_at = datetime.now(timezone.utc)
        self.console_logs: List[ConsoleEntry] = []
        self.network_logs: List[NetworkEntry] = []

        # Set by the network observer so clearing can drop pending correlations
        self.network_observer = None
        self.console_observer = None

    def clear_console_logs(self) -> None:
        self.console_logs = []
        logger.debug(f"Console logs cleared for session {self.session_id}")

    def clear_network_logs(self) -> None:
        self.network_logs = []
        if self.network_observer is not None:
            self.network_observer.forget_pending()
        logger.debug(f"Network logs cleared for session {self.session_id}")

    def describe(self) -> SessionDescriptor:
        """Build a descriptor summarizing this session."""
        return SessionDescriptor(
            session_id=self.session_id,
            options=self.options,
            created_at=self.created_at,
            console_log_count=len(self.console_logs),
            network_log_count=len(self.network_logs),
        )

    async def close(self) -> None:
        """Close the browser process, which also releases context and page."""
        await self.browser.close()

    def __repr__(self) -> str:
        return (
            f"BrowserSession(id={self.session_id}, "
            f"console={len(self.console_logs)}, "
            f"network={len(self.network_logs)})"
        )
