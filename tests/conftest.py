"""Shared test fixtures and configuration for WebKit Inspector tests."""

import pytest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock
import sys

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from webkit_inspector.capture.operations import SessionOperations
from webkit_inspector.capture.registry import SessionRegistry
from webkit_inspector.capture.session import BrowserSession

from tests.helpers import make_launched_browser, make_mock_page


@pytest.fixture
def mock_page():
    return make_mock_page()


@pytest.fixture
def session(mock_page):
    """Bare session record around a mock page, with no observers attached."""
    return BrowserSession("test-session", browser=AsyncMock(), context=AsyncMock(), page=mock_page)


@pytest.fixture
def mock_factory():
    """Browser factory that hands out a fresh mock browser per launch."""
    factory = MagicMock()
    factory.launch = AsyncMock(side_effect=lambda: make_launched_browser())
    factory.stop = AsyncMock()
    return factory


@pytest.fixture
def registry(mock_factory):
    return SessionRegistry(mock_factory)


@pytest.fixture
def operations(registry, tmp_path):
    return SessionOperations(registry, screenshot_dir=tmp_path / "screenshots")
