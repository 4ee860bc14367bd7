"""SessionStore for in-memory session bookkeeping.

This module provides the SessionStore class which handles:
- Creating new sessions
- Listing sessions with their turn counts
- Reading session history
- Appending turns, singly or as an atomic batch
"""

import logging
from typing import Iterable

from toolchat_server.errors import SessionNotFound
from toolchat_server.sessions.session import ChatSession
from toolchat_server.sessions.types import SessionSummary, Turn

logger = logging.getLogger(__name__)


class SessionStore:
    """Process-local mapping from session ID to ChatSession.

    Sessions live for the lifetime of the process. Each session carries its
    own lock, so appends to one session never wait on another session.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, ChatSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create_session(self) -> ChatSession:
        """Create a new empty session.

        Returns:
            The newly created ChatSession
        """
        session_id = ChatSession.generate_session_id()
        while session_id in self._sessions:
            session_id = ChatSession.generate_session_id()

        session = ChatSession(session_id=session_id)
        self._sessions[session_id] = session

        logger.info(f"Created new session {session_id}")
        return session

    def get_session(self, session_id: str) -> ChatSession:
        """Get a specific session by ID.

        Raises:
            SessionNotFound: If the session doesn't exist
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def list_sessions(self) -> list[SessionSummary]:
        """List all sessions in creation order.

        Returns:
            One summary per session with its ID, creation time and turn count
        """
        summaries = [session.summary() for session in self._sessions.values()]
        logger.debug(f"Listed {len(summaries)} sessions")
        return summaries

    async def get_history(self, session_id: str) -> list[Turn]:
        """Get the ordered turn history of a session.

        Raises:
            SessionNotFound: If the session doesn't exist
        """
        return await self.get_session(session_id).snapshot()

    async def append_turn(self, session_id: str, turn: Turn) -> None:
        """Append a single turn to a session.

        Raises:
            SessionNotFound: If the session doesn't exist
        """
        await self.get_session(session_id).append((turn,))

    async def append_turns(self, session_id: str, turns: Iterable[Turn]) -> None:
        """Append several turns to a session as one indivisible step.

        Raises:
            SessionNotFound: If the session doesn't exist
        """
        count = await self.get_session(session_id).append(turns)
        logger.debug(f"Session {session_id} now has {count} turns")
