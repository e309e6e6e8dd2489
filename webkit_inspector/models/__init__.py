"""Captured telemetry models package."""

from .capture import (
    BROWSER_SOURCE,
    now_ms,
    NetworkPhase,
    ConsoleEntry,
    NetworkEntry,
    SessionOptions,
    SessionDescriptor,
    BoundingRect,
    ElementInspection,
    PerformanceMetrics,
    PageInfo,
    ScreenshotCapture,
)

__all__ = [
    'BROWSER_SOURCE',
    'now_ms',

    # Log entries
    'NetworkPhase',
    'ConsoleEntry',
    'NetworkEntry',

    # Sessions
    'SessionOptions',
    'SessionDescriptor',

    # Operation results
    'BoundingRect',
    'ElementInspection',
    'PerformanceMetrics',
    'PageInfo',
    'ScreenshotCapture',
]
