"""Pydantic models for captured session telemetry and operation results.

This module defines the data shapes produced by the session manager:
console and network log entries, session options and descriptors, and the
records returned by page inspection, metrics and screenshot operations.
Field names are snake_case in Python and camelCase when dumped by alias.
"""

import time
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


BROWSER_SOURCE = "browser"


def now_ms() -> int:
    """Current wall-clock time as integer milliseconds since the epoch."""
    return int(time.time() * 1000)


class CaptureModel(BaseModel):
    """Base model with camelCase aliases for outward serialization."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Dump to a JSON-ready dict using camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


class NetworkPhase(str, Enum):
    """Lifecycle phase recorded in a network entry's ``method`` field."""
    REQUEST_SENT = "Network.requestSent"
    RESPONSE_RECEIVED = "Network.responseReceived"
    LOADING_FAILED = "Network.loadingFailed"


class ConsoleEntry(CaptureModel):
    """One console message, immutable once captured."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    level: str = Field(description="Uppercased console category as reported by the engine")
    message: str = Field(description="Console message text")
    timestamp: int = Field(
        default_factory=now_ms,
        description="Capture time in milliseconds since epoch"
    )
    source: str = Field(default=BROWSER_SOURCE, description="Origin of the message")
    url: Optional[str] = Field(default=None, description="Script URL that emitted the message")
    line_number: Optional[int] = Field(default=None, description="Source line number")
    column_number: Optional[int] = Field(default=None, description="Source column number")

    @classmethod
    def from_playwright_message(cls, message, timestamp: Optional[int] = None) -> "ConsoleEntry":
        """Create a ConsoleEntry from a Playwright console message.

        The category is uppercased but otherwise kept verbatim, so a
        ``console.warn`` call is stored with whatever name the engine uses.
        """
        location = getattr(message, 'location', None)

        return cls(
            level=str(message.type).upper(),
            message=message.text,
            timestamp=timestamp if timestamp is not None else now_ms(),
            url=(location.get('url') or None) if location else None,
            line_number=location.get('lineNumber') if location else None,
            column_number=location.get('columnNumber') if location else None,
        )


class NetworkEntry(CaptureModel):
    """One HTTP exchange, possibly only its request or response half.

    Entries are updated in place when a response is correlated with the
    request that produced them; the original request timestamp is kept.
    """

    method: NetworkPhase = Field(description="Lifecycle phase tag (not the HTTP verb)")
    url: str = Field(description="Resource URL")
    status: Optional[int] = Field(default=None, description="HTTP status code")
    request_headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Request headers"
    )
    response_headers: Optional[Dict[str, str]] = Field(
        default=None,
        description="Response headers, absent until the response is recorded"
    )
    timestamp: int = Field(
        default_factory=now_ms,
        description="Capture time in milliseconds since epoch"
    )
    request_method: Optional[str] = Field(default=None, description="HTTP verb of the request")
    failure: Optional[str] = Field(default=None, description="Engine failure text for failed loads")

    @property
    def is_pending(self) -> bool:
        """True while only the request half is known."""
        return self.method == NetworkPhase.REQUEST_SENT and self.status is None


class SessionOptions(CaptureModel):
    """Options recorded with a session.

    These flags are advisory: the engine's feature set bounds what can
    actually be toggled.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    enable_inspection: bool = Field(default=True, description="Allow element inspection")
    enable_profiling: bool = Field(default=True, description="Allow performance profiling")
    uses_technology_preview: bool = Field(
        default=False,
        description="Prefer a technology-preview build of the engine"
    )


class SessionDescriptor(CaptureModel):
    """Summary of a registered session."""

    session_id: str
    options: SessionOptions
    created_at: datetime
    console_log_count: int = 0
    network_log_count: int = 0


class BoundingRect(CaptureModel):
    x: float
    y: float
    width: float
    height: float


class ElementInspection(CaptureModel):
    """Description of the first element matching a selector."""

    tag_name: str = Field(description="Lowercased tag name")
    text: str = Field(default="", description="Text content, truncated")
    attributes: Dict[str, str] = Field(default_factory=dict)
    bounding_rect: Optional[BoundingRect] = Field(
        default=None,
        description="Viewport rectangle, absent when the element is not rendered"
    )


class PerformanceMetrics(CaptureModel):
    """Navigation timing and paint marks; unavailable figures stay absent."""

    navigation_start: Optional[float] = None
    load_event_end: Optional[float] = None
    dom_content_loaded_event_end: Optional[float] = None
    first_paint: Optional[float] = None
    first_contentful_paint: Optional[float] = None


class PageInfo(CaptureModel):
    url: str
    title: str


class ScreenshotCapture(CaptureModel):
    """A viewport screenshot persisted to disk and returned inline."""

    session_id: str
    path: Path = Field(description="File the PNG was written to")
    image_base64: str = Field(description="Base64-encoded PNG bytes")
