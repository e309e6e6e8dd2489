"""Network observer that correlates requests and responses into log entries.

This module provides the NetworkObserver class that hooks into Playwright
network events for one session. Each outgoing request is appended to the
session's network buffer immediately; when its response arrives the same
entry is updated in place.

Correlation first uses the identity of the engine's request object, which
is exact even when several requests to the same URL overlap. If that lookup
misses, the oldest still-pending entry with the same URL is used. If that
misses too, the response is appended as a standalone entry. A correlation
miss is never an error.
"""

import logging
from typing import Dict, Optional, Tuple

from playwright.async_api import Request, Response

from ..models.capture import NetworkEntry, NetworkPhase, now_ms

logger = logging.getLogger(__name__)


class NetworkObserver:
    """Observes a session's page and records its HTTP exchanges."""

    def __init__(self, session):
        """Initialize network observer and attach it to the session's page.

        Args:
            session: BrowserSession whose network buffer receives entries
        """
        self.session = session
        self.page = session.page
        # id(request) -> (request, entry); the request is held so its id stays unique
        self._pending: Dict[int, Tuple[Request, NetworkEntry]] = {}

        session.network_observer = self
        self._setup_listeners()

    def _setup_listeners(self) -> None:
        """Setup Playwright event listeners for network events."""
        self.page.on("request", self._on_request)
        self.page.on("response", self._on_response)
        self.page.on("requestfailed", self._on_request_failed)

        logger.debug(f"Network observer attached to session {self.session.session_id}")

    @staticmethod
    def _headers(message) -> Dict[str, str]:
        try:
            return dict(message.headers or {})
        except Exception as e:
            logger.warning(f"Failed to extract headers: {e}")
            return {}

    def _on_request(self, request: Request) -> None:
        """Handle request sent event.

        Args:
            request: Playwright request object
        """
        try:
            entry = NetworkEntry(
                method=NetworkPhase.REQUEST_SENT,
                url=request.url,
                request_headers=self._headers(request),
                request_method=request.method,
                timestamp=now_ms(),
            )
        except Exception as e:
            logger.error(f"Error processing request: {e}")
            return

        self.session.network_logs.append(entry)
        self._pending[id(request)] = (request, entry)

        logger.debug(f"Request sent: {request.method} {request.url}")

    def _take_pending(self, request: Optional[Request], url: str) -> Optional[NetworkEntry]:
        """Remove and return the pending entry for a request.

        Args:
            request: Engine request the event refers to, if known
            url: URL used for the fallback match

        Returns:
            The matched entry, or None if nothing pending matches
        """
        if request is not None:
            pending = self._pending.get(id(request))
            if pending is not None and pending[0] is request and pending[1].is_pending:
                del self._pending[id(request)]
                return pending[1]

        for entry in self.session.network_logs:
            if entry.url == url and entry.is_pending:
                for key, (_, pending_entry) in list(self._pending.items()):
                    if pending_entry is entry:
                        del self._pending[key]
                        break
                return entry

        return None

    def _on_response(self, response: Response) -> None:
        """Handle response received event.

        Args:
            response: Playwright response object
        """
        try:
            request = response.request
        except Exception:
            request = None

        try:
            url = response.url
            entry = self._take_pending(request, url)

            if entry is not None:
                entry.method = NetworkPhase.RESPONSE_RECEIVED
                entry.status = response.status
                entry.response_headers = self._headers(response)
                logger.debug(f"Response received: {response.status} {url}")
                return

            self.session.network_logs.append(NetworkEntry(
                method=NetworkPhase.RESPONSE_RECEIVED,
                url=url,
                status=response.status,
                request_headers=self._headers(request) if request is not None else {},
                response_headers=self._headers(response),
                request_method=request.method if request is not None else None,
                timestamp=now_ms(),
            ))
            logger.debug(f"Uncorrelated response recorded: {response.status} {url}")

        except Exception as e:
            logger.error(f"Error processing response: {e}")

    def _on_request_failed(self, request: Request) -> None:
        """Handle request failed event.

        Args:
            request: Playwright request object
        """
        try:
            url = request.url
            failure = request.failure or "Unknown error"
            entry = self._take_pending(request, url)

            if entry is None:
                entry = NetworkEntry(
                    method=NetworkPhase.LOADING_FAILED,
                    url=url,
                    request_headers=self._headers(request),
                    request_method=request.method,
                    timestamp=now_ms(),
                )
                self.session.network_logs.append(entry)

            entry.method = NetworkPhase.LOADING_FAILED
            entry.failure = failure

            logger.debug(f"Request failed: {url} - {failure}")

        except Exception as e:
            logger.error(f"Error processing request failure: {e}")

    def forget_pending(self) -> None:
        """Drop all pending correlations (used when the buffer is cleared)."""
        self._pending.clear()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def __repr__(self) -> str:
        return (
            f"NetworkObserver(session={self.session.session_id}, "
            f"total={len(self.session.network_logs)}, "
            f"pending={self.pending_count})"
        )
