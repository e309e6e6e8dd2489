"""Mock builders for Playwright objects used across the unit tests."""

from unittest.mock import AsyncMock, MagicMock

from webkit_inspector.capture.browser_factory import LaunchedBrowser


def make_mock_page():
    """Mock Playwright page whose listeners can be inspected."""
    page = AsyncMock()
    page.on = MagicMock()
    page.url = "about:blank"
    return page


def make_launched_browser():
    """Mock browser, context and page as returned by BrowserFactory.launch."""
    return LaunchedBrowser(
        browser=AsyncMock(),
        context=AsyncMock(),
        page=make_mock_page(),
    )


def page_handlers(page):
    """Map event name to the handler registered with page.on."""
    return {call.args[0]: call.args[1] for call in page.on.call_args_list}


def make_console_message(type_="log", text="hello", location=None):
    """Mock Playwright console message."""
    message = MagicMock()
    message.type = type_
    message.text = text
    message.location = location or {}
    return message


def make_request(url="https://example.com/api/data", method="GET", headers=None, failure=None):
    """Mock Playwright request."""
    request = MagicMock()
    request.url = url
    request.method = method
    request.headers = headers if headers is not None else {"user-agent": "Test"}
    request.failure = failure
    return request


def make_response(request, status=200, headers=None, url=None):
    """Mock Playwright response for a request."""
    response = MagicMock()
    response.request = request
    response.url = url or request.url
    response.status = status
    response.headers = headers if headers is not None else {"content-type": "application/json"}
    return response
