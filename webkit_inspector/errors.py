"""Error kinds raised by the session manager and its operations.

Every error carries a stable ``kind`` string so the outward tool layer can
report failures as structured results without inspecting exception types.
"""

from typing import Optional


class InspectorError(Exception):
    """Base exception for all session manager failures."""

    kind = "InspectorError"

    def __init__(self, message: str, session_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.session_id = session_id


class SessionAlreadyExists(InspectorError):
    """Raised when starting a session whose identifier is already registered."""

    kind = "SessionAlreadyExists"

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} already exists", session_id)


class SessionNotFound(InspectorError):
    """Raised when an operation references an unregistered session."""

    kind = "SessionNotFound"

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found", session_id)


class SessionCreationFailed(InspectorError):
    """Raised when the browser, context or page could not be brought up."""

    kind = "SessionCreationFailed"


class SessionCloseFailed(InspectorError):
    """Raised when the engine refused to release a session's browser."""

    kind = "SessionCloseFailed"


class NavigationFailed(InspectorError):
    kind = "NavigationFailed"


class ScriptExecutionFailed(InspectorError):
    kind = "ScriptExecutionFailed"


class ElementNotFound(InspectorError):
    kind = "ElementNotFound"


class ScreenshotFailed(InspectorError):
    kind = "ScreenshotFailed"


class MetricsUnavailable(InspectorError):
    kind = "MetricsUnavailable"


class PageQueryFailed(InspectorError):
    """Raised when the live URL or title cannot be read from the page."""

    kind = "PageQueryFailed"


class ConfigLoadError(InspectorError):
    """Raised when configuration loading or validation fails."""

    kind = "ConfigLoadError"
