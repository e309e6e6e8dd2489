"""Session registry owning the lifecycle of every browser session.

This module provides the SessionRegistry class, which maps caller-chosen
session identifiers to BrowserSession records. Creating a session launches
a dedicated browser and attaches the console and network observers before
the record is published, so no event emitted by the page can be missed.
"""

import logging
from typing import Dict, List, Optional, Set

from .browser_factory import BrowserFactory
from .console_observer import ConsoleObserver
from .network_observer import NetworkObserver
from .session import BrowserSession
from ..errors import (
    SessionAlreadyExists,
    SessionCloseFailed,
    SessionCreationFailed,
    SessionNotFound,
)
from ..models.capture import SessionOptions

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Registry of active browser sessions.

    Holds at most one session per identifier. Instances are independent of
    each other; the process constructs one and hands it to whatever
    dispatches operations.
    """

    def __init__(self, factory: Optional[BrowserFactory] = None):
        """Initialize an empty registry.

        Args:
            factory: Browser factory used to launch session browsers
        """
        self.factory = factory or BrowserFactory()
        self._sessions: Dict[str, BrowserSession] = {}
        self._starting: Set[str] = set()

    async def __aenter__(self) -> "SessionRegistry":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()

    async def create(self, session_id: str, options: Optional[SessionOptions] = None) -> BrowserSession:
        """Launch a new isolated browser and register it.

        Args:
            session_id: Caller-chosen identifier, unique among active sessions
            options: Session options; defaults apply when omitted

        Returns:
            The registered BrowserSession with capture already attached

        Raises:
            SessionAlreadyExists: If the identifier is registered or being created
            SessionCreationFailed: If the browser, context or page failed to start
        """
        if session_id in self._sessions or session_id in self._starting:
            raise SessionAlreadyExists(session_id)

        self._starting.add(session_id)
        try:
            try:
                launched = await self.factory.launch()
            except Exception as e:
                logger.error(f"Failed to launch browser for session {session_id}: {e}")
                raise SessionCreationFailed(
                    f"Failed to create session {session_id}: {e}", session_id
                ) from e

            session = BrowserSession(
                session_id,
                browser=launched.browser,
                context=launched.context,
                page=launched.page,
                options=options,
            )

            try:
                session.console_observer = ConsoleObserver(session)
                NetworkObserver(session)
            except Exception as e:
                logger.error(f"Failed to attach capture for session {session_id}: {e}")
                await self._release(session)
                raise SessionCreationFailed(
                    f"Failed to create session {session_id}: {e}", session_id
                ) from e

            self._sessions[session_id] = session
        finally:
            self._starting.discard(session_id)

        logger.info(f"Session {session_id} started")
        return session

    async def _release(self, session: BrowserSession) -> None:
        try:
            await session.close()
        except Exception as e:
            logger.warning(f"Failed to release browser for session {session.session_id}: {e}")

    def get(self, session_id: str) -> Optional[BrowserSession]:
        """Return the session for an identifier, or None if absent."""
        return self._sessions.get(session_id)

    def require(self, session_id: str) -> BrowserSession:
        """Return the session for an identifier.

        Raises:
            SessionNotFound: If no session is registered under the identifier
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    async def close(self, session_id: str) -> None:
        """Close a session's browser and remove its record.

        The record is only removed once the browser has been released; if
        releasing fails the session stays registered so the close can be
        retried.

        Raises:
            SessionNotFound: If no session is registered under the identifier
            SessionCloseFailed: If the engine failed to close the browser
        """
        session = self.require(session_id)

        try:
            await session.close()
        except Exception as e:
            raise SessionCloseFailed(f"Failed to close session {session_id}: {e}", session_id) from e

        self._sessions.pop(session_id, None)
        logger.info(f"Session {session_id} closed")

    async def close_all(self) -> List[str]:
        """Close every registered session.

        Individual failures are logged and do not stop the sweep.

        Returns:
            Identifiers of the sessions that failed to close
        """
        failed = []
        for session_id in self.list():
            try:
                await self.close(session_id)
            except Exception as e:
                logger.warning(f"Failed to close session {session_id}: {e}")
                failed.append(session_id)
        return failed

    def list(self) -> List[str]:
        """Snapshot of all registered session identifiers."""
        return list(self._sessions.keys())

    async def shutdown(self) -> List[str]:
        """Close all sessions and stop the browser driver.

        Returns:
            Identifiers of the sessions that failed to close
        """
        failed = await self.close_all()
        try:
            await self.factory.stop()
        except Exception as e:
            logger.warning(f"Failed to stop browser driver: {e}")
        return failed

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __repr__(self) -> str:
        return f"SessionRegistry(sessions={self.list()})"
