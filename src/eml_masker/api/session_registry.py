"""
In-memory registry of masking sessions served by the API.

Sessions are kept in insertion order and the oldest one is evicted when the
registry is full. Nothing is persisted: a restart drops every session.
"""

import uuid
from collections import OrderedDict
from typing import Optional

import structlog

from ..config import settings
from ..masking.session import MaskingSession
from ..models.email_document import LoadedEmail

logger = structlog.get_logger(__name__)


class SessionNotFoundError(KeyError):
    """Raised when a session id is unknown or was evicted."""


class SessionRegistry:
    """
    Capped map of session id to MaskingSession.

    Args:
        max_sessions: Sessions kept before evicting the oldest
            (default: settings.max_sessions)
    """

    def __init__(self, max_sessions: Optional[int] = None):
        self.max_sessions = max_sessions if max_sessions is not None else settings.max_sessions
        self._sessions: "OrderedDict[str, MaskingSession]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def create(self, email: LoadedEmail) -> str:
        """Open a session for a loaded email and return its id."""
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = MaskingSession(email)
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("session_evicted", evicted_session_id=evicted_id)
        return session_id

    def get(self, session_id: str) -> MaskingSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def remove(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)

    def clear(self) -> None:
        self._sessions.clear()


# Global registry used by the API routes
registry = SessionRegistry()
