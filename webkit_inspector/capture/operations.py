"""Session operations exposed to callers.

This module provides the SessionOperations class implementing the public
contract on top of a SessionRegistry: navigation, script execution, element
inspection, screenshots, performance metrics, page info and log access.

Every operation resolves its session first and raises SessionNotFound
before touching the engine. Engine failures are wrapped in the matching
InspectorError subclass with the underlying cause in the message; the
session stays registered and usable afterwards.
"""

import base64
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .query import ALL_LEVELS, filter_console_logs, sort_by_timestamp
from .registry import SessionRegistry
from ..errors import (
    ElementNotFound,
    MetricsUnavailable,
    NavigationFailed,
    PageQueryFailed,
    ScreenshotFailed,
    ScriptExecutionFailed,
)
from ..models.capture import (
    BoundingRect,
    ConsoleEntry,
    ElementInspection,
    NetworkEntry,
    PageInfo,
    PerformanceMetrics,
    ScreenshotCapture,
)

logger = logging.getLogger(__name__)

DEFAULT_SCREENSHOT_DIR = Path.home() / "webkit-inspector-screenshots"

# Characters replaced when a session id becomes part of a file name
UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.-]")

# Runs the caller's script as a function body with the arguments spread positionally
SCRIPT_RUNNER_JS = """
({ script, args }) => {
    const fn = new Function('...args', script);
    return fn(...args);
}
"""

ELEMENT_TAG_JS = "el => el.tagName.toLowerCase()"

ELEMENT_ATTRIBUTES_JS = """
el => {
    const attrs = {};
    for (const attr of el.attributes) {
        attrs[attr.name] = attr.value;
    }
    return attrs;
}
"""

PERFORMANCE_METRICS_JS = """
() => {
    const figure = value => (typeof value === 'number' && value > 0) ? value : null;
    const timing = performance.timing;
    const paintEntries = performance.getEntriesByType('paint');
    const paintMark = name => {
        const entry = paintEntries.find(e => e.name === name);
        return entry ? figure(entry.startTime) : null;
    };
    return {
        navigationStart: timing ? figure(timing.navigationStart) : null,
        loadEventEnd: timing ? figure(timing.loadEventEnd) : null,
        domContentLoadedEventEnd: timing ? figure(timing.domContentLoadedEventEnd) : null,
        firstPaint: paintMark('first-paint'),
        firstContentfulPaint: paintMark('first-contentful-paint'),
    };
}
"""


class SessionOperations:
    """Operations against sessions held in a SessionRegistry."""

    def __init__(
        self,
        registry: SessionRegistry,
        screenshot_dir: Optional[Union[str, Path]] = None,
        navigation_timeout_ms: Optional[int] = None,
        selector_timeout_ms: Optional[int] = None,
        inspect_text_limit: int = 500,
    ):
        """Initialize operations.

        Args:
            registry: Registry used to resolve session identifiers
            screenshot_dir: Directory screenshots are written to
            navigation_timeout_ms: Navigation timeout; engine default when None
            selector_timeout_ms: Element lookup timeout; engine default when None
            inspect_text_limit: Maximum characters of element text returned
        """
        self.registry = registry
        self.screenshot_dir = Path(screenshot_dir).expanduser() if screenshot_dir else DEFAULT_SCREENSHOT_DIR
        self.navigation_timeout_ms = navigation_timeout_ms
        self.selector_timeout_ms = selector_timeout_ms
        self.inspect_text_limit = inspect_text_limit

    async def navigate(self, session_id: str, url: str) -> None:
        """Load a URL and wait for the page's load event.

        Raises:
            SessionNotFound: If the session is not registered
            NavigationFailed: On bad URLs, network errors or timeouts
        """
        session = self.registry.require(session_id)
        logger.info(f"Session {session_id} navigating to {url}")

        goto_options = {'wait_until': 'load'}
        if self.navigation_timeout_ms is not None:
            goto_options['timeout'] = self.navigation_timeout_ms

        try:
            await session.page.goto(url, **goto_options)
        except PlaywrightTimeoutError as e:
            logger.warning(f"Timed out waiting for load event in session {session_id}: {e}")
            raise NavigationFailed(f"Navigation failed: {e}", session_id) from e
        except Exception as e:
            logger.error(f"Navigation failed for session {session_id}: {e}")
            raise NavigationFailed(f"Navigation failed: {e}", session_id) from e

    async def execute_script(
        self,
        session_id: str,
        script: str,
        args: Optional[Sequence[Any]] = None
    ) -> Any:
        """Evaluate a script body in the page with positional arguments.

        Args:
            session_id: Target session
            script: Function body; may ``return`` a serializable value
            args: Positional arguments available to the body as ``args``

        Returns:
            Whatever the script returns, deserialized

        Raises:
            SessionNotFound: If the session is not registered
            ScriptExecutionFailed: If evaluation throws or cannot be serialized
        """
        session = self.registry.require(session_id)

        try:
            return await session.page.evaluate(
                SCRIPT_RUNNER_JS,
                {'script': script, 'args': list(args or [])}
            )
        except Exception as e:
            logger.error(f"Script execution failed for session {session_id}: {e}")
            raise ScriptExecutionFailed(f"Script execution failed: {e}", session_id) from e

    def _screenshot_path(self, session_id: str) -> Path:
        safe_id = UNSAFE_FILENAME_CHARS.sub("_", session_id)
        timestamp = datetime.now(timezone.utc).strftime('%Y-%m-%dT%H-%M-%S-%fZ')
        path = self.screenshot_dir / f"screenshot-{safe_id}-{timestamp}.png"
        counter = 1
        while path.exists():
            path = self.screenshot_dir / f"screenshot-{safe_id}-{timestamp}-{counter}.png"
            counter += 1
        return path

    async def take_screenshot(self, session_id: str) -> ScreenshotCapture:
        """Capture the visible viewport as PNG, save it and return it encoded.

        Raises:
            SessionNotFound: If the session is not registered
            ScreenshotFailed: If capture or the file write fails
        """
        session = self.registry.require(session_id)

        try:
            image = await session.page.screenshot(type='png', full_page=False)

            self.screenshot_dir.mkdir(parents=True, exist_ok=True)
            path = self._screenshot_path(session_id)
            path.write_bytes(image)
        except Exception as e:
            logger.error(f"Screenshot failed for session {session_id}: {e}")
            raise ScreenshotFailed(f"Screenshot failed: {e}", session_id) from e

        logger.info(f"Screenshot saved to: {path}")
        return ScreenshotCapture(
            session_id=session_id,
            path=path,
            image_base64=base64.b64encode(image).decode('ascii'),
        )

    async def inspect_element(self, session_id: str, selector: str) -> ElementInspection:
        """Describe the first element matching a selector.

        Raises:
            SessionNotFound: If the session is not registered
            ElementNotFound: If nothing matches before the lookup times out,
                or the element cannot be read
        """
        session = self.registry.require(session_id)

        wait_options = {'state': 'attached'}
        if self.selector_timeout_ms is not None:
            wait_options['timeout'] = self.selector_timeout_ms

        try:
            element = await session.page.wait_for_selector(selector, **wait_options)
        except PlaywrightTimeoutError as e:
            raise ElementNotFound(f"No element matches selector {selector}: {e}", session_id) from e
        except Exception as e:
            raise ElementNotFound(f"Element inspection failed: {e}", session_id) from e

        if element is None:
            raise ElementNotFound(f"No element matches selector {selector}", session_id)

        try:
            tag_name = await element.evaluate(ELEMENT_TAG_JS)
            text = await element.text_content()
            attributes = await element.evaluate(ELEMENT_ATTRIBUTES_JS)
            box = await element.bounding_box()
        except Exception as e:
            raise ElementNotFound(f"Element inspection failed: {e}", session_id) from e
        finally:
            await self._dispose(element)

        return ElementInspection(
            tag_name=tag_name,
            text=(text or '')[:self.inspect_text_limit],
            attributes=attributes or {},
            bounding_rect=BoundingRect(**box) if box else None,
        )

    async def _dispose(self, element) -> None:
        try:
            await element.dispose()
        except Exception as e:
            logger.debug(f"Failed to dispose element handle: {e}")

    async def get_performance_metrics(self, session_id: str) -> PerformanceMetrics:
        """Read navigation timing and paint marks from the page.

        Raises:
            SessionNotFound: If the session is not registered
            MetricsUnavailable: If the page cannot report timing data
        """
        session = self.registry.require(session_id)

        try:
            raw = await session.page.evaluate(PERFORMANCE_METRICS_JS)
            return PerformanceMetrics.model_validate(raw or {})
        except Exception as e:
            logger.error(f"Failed to get performance metrics for session {session_id}: {e}")
            raise MetricsUnavailable(f"Failed to get performance metrics: {e}", session_id) from e

    async def get_current_url(self, session_id: str) -> str:
        session = self.registry.require(session_id)
        try:
            return session.page.url
        except Exception as e:
            raise PageQueryFailed(f"Failed to get current URL: {e}", session_id) from e

    async def get_page_title(self, session_id: str) -> str:
        session = self.registry.require(session_id)
        try:
            return await session.page.title()
        except Exception as e:
            raise PageQueryFailed(f"Failed to get page title: {e}", session_id) from e

    async def get_page_info(self, session_id: str) -> PageInfo:
        """Live URL and title of the session's page."""
        return PageInfo(
            url=await self.get_current_url(session_id),
            title=await self.get_page_title(session_id),
        )

    async def get_console_logs(self, session_id: str, level: str = ALL_LEVELS) -> List[ConsoleEntry]:
        """Snapshot of console entries, optionally of one level, oldest first.

        Args:
            session_id: Target session
            level: Exact uppercase level to keep, or ``ALL``

        Returns:
            New list of entries; later capture never changes it
        """
        session = self.registry.require(session_id)
        return filter_console_logs(session.console_logs, level)

    async def get_network_logs(self, session_id: str) -> List[NetworkEntry]:
        """Snapshot of network entries, oldest first.

        Entries are copied because the live ones are updated in place when
        responses arrive.
        """
        session = self.registry.require(session_id)
        return [entry.model_copy(deep=True) for entry in sort_by_timestamp(session.network_logs)]

    async def clear_console_logs(self, session_id: str) -> None:
        self.registry.require(session_id).clear_console_logs()

    async def clear_network_logs(self, session_id: str) -> None:
        self.registry.require(session_id).clear_network_logs()
