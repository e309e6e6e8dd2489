"""Browser factory for launching isolated Playwright browser instances.

This module provides the BrowserFactory class that owns the Playwright
driver and launches one dedicated browser process, context and page per
session. Each launch is fully isolated: its own process, its own cookies
and storage, and a single page configured with a fixed viewport.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Playwright,
    async_playwright,
    Page
)

logger = logging.getLogger(__name__)


class BrowserEngineType:
    """Supported browser engine types."""
    WEBKIT = "webkit"
    CHROMIUM = "chromium"
    FIREFOX = "firefox"


class BrowserConfig:
    """Configuration for browser launch and context setup."""

    def __init__(
        self,
        engine: str = BrowserEngineType.WEBKIT,
        headless: bool = True,
        slow_mo: int = 0,
        viewport: Optional[Dict[str, int]] = None,
        user_agent: Optional[str] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        ignore_https_errors: bool = False,
        locale: Optional[str] = None,
        timezone: Optional[str] = None,
    ):
        """Initialize browser configuration.

        Args:
            engine: Browser engine to use (webkit, chromium, firefox)
            headless: Run browser in headless mode
            slow_mo: Slow down operations by specified milliseconds
            viewport: Viewport size dict with 'width' and 'height'
            user_agent: Custom User-Agent string
            extra_headers: Additional HTTP headers for all requests
            ignore_https_errors: Ignore SSL/TLS certificate errors
            locale: Locale for the browser context
            timezone: Timezone ID (e.g., 'America/New_York')
        """
        self.engine = engine
        self.headless = headless
        self.slow_mo = slow_mo
        self.viewport = viewport or {'width': 1920, 'height': 1080}
        self.user_agent = user_agent
        self.extra_headers = extra_headers or {}
        self.ignore_https_errors = ignore_https_errors
        self.locale = locale
        self.timezone = timezone

    def to_browser_options(self) -> Dict[str, Any]:
        """Convert to Playwright browser launch options."""
        options = {
            'headless': self.headless,
        }

        if self.slow_mo:
            options['slow_mo'] = self.slow_mo

        return options

    def to_context_options(self) -> Dict[str, Any]:
        """Convert to Playwright browser context options."""
        options = {}

        if self.viewport:
            options['viewport'] = self.viewport

        if self.user_agent:
            options['user_agent'] = self.user_agent

        if self.extra_headers:
            options['extra_http_headers'] = self.extra_headers

        if self.ignore_https_errors:
            options['ignore_https_errors'] = self.ignore_https_errors

        if self.locale:
            options['locale'] = self.locale

        if self.timezone:
            options['timezone_id'] = self.timezone

        return options


@dataclass
class LaunchedBrowser:
    """Engine handles owned by exactly one session."""
    browser: Browser
    context: BrowserContext
    page: Page


class BrowserFactory:
    """Factory that launches one isolated browser per session."""

    def __init__(self, config: Optional[BrowserConfig] = None):
        """Initialize browser factory with configuration.

        Args:
            config: Browser configuration object
        """
        self.config = config or BrowserConfig()
        self.playwright: Optional[Playwright] = None
        self._launched_count = 0

    async def start(self) -> None:
        """Start the Playwright driver if it is not running yet."""
        if self.playwright is not None:
            return

        logger.info(f"Starting Playwright driver for engine: {self.config.engine}")
        self.playwright = await async_playwright().start()

    async def stop(self) -> None:
        """Stop the Playwright driver.

        Browsers launched by this factory are owned by their sessions and
        must be closed before the driver is stopped.
        """
        if self.playwright is None:
            return

        try:
            await self.playwright.stop()
            logger.info("Playwright driver stopped")
        finally:
            self.playwright = None

    def _browser_type(self):
        if self.config.engine == BrowserEngineType.CHROMIUM:
            return self.playwright.chromium
        if self.config.engine == BrowserEngineType.FIREFOX:
            return self.playwright.firefox
        return self.playwright.webkit

    async def launch(self) -> LaunchedBrowser:
        """Launch a new browser process with one context and one page.

        If the context or page cannot be created the browser process is
        closed again before the error propagates, so a failed launch never
        leaves an orphan process behind.

        Returns:
            Handles for the new browser, context and page
        """
        await self.start()

        browser = await self._browser_type().launch(**self.config.to_browser_options())
        try:
            context = await browser.new_context(**self.config.to_context_options())
            page = await context.new_page()
        except Exception:
            try:
                await browser.close()
            except Exception as close_error:
                logger.warning(f"Failed to close browser after launch error: {close_error}")
            raise

        self._launched_count += 1
        logger.debug(
            f"Launched {self.config.engine} browser #{self._launched_count} "
            f"(headless={self.config.headless})"
        )
        return LaunchedBrowser(browser=browser, context=context, page=page)

    @property
    def is_running(self) -> bool:
        """Check if the Playwright driver is running."""
        return self.playwright is not None

    @property
    def launched_count(self) -> int:
        """Number of browsers launched by this factory."""
        return self._launched_count

    def __repr__(self) -> str:
        return (
            f"BrowserFactory(engine={self.config.engine}, "
            f"headless={self.config.headless}, "
            f"running={self.is_running}, "
            f"launched={self.launched_count})"
        )
