"""ChatSession class for managing individual chat sessions.

This module provides the ChatSession class which handles:
- Holding the ordered turn history of one conversation
- Appending turns under the session's own lock
- Producing consistent snapshots of the history
- Session identifier generation
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable

from toolchat_server.sessions.types import SessionSummary, Turn

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """Current time as an ISO 8601 UTC string with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ChatSession:
    """Represents a single chat session with its turn history.

    History is append-only. Appends and snapshot reads go through the
    session's lock, so a reader never observes a half-applied batch and
    concurrent appends land in a single total order.
    """

    def __init__(self, session_id: str, created_at: str | None = None):
        """Initialize a ChatSession.

        Args:
            session_id: Unique session identifier
            created_at: Creation timestamp (default: now)
        """
        self.session_id = session_id
        self.created_at = created_at or utc_timestamp()
        self._turns: list[Turn] = []
        self._lock = asyncio.Lock()

    @property
    def turn_count(self) -> int:
        return len(self._turns)

    async def append(self, turns: Iterable[Turn]) -> int:
        """Append turns to the history as one indivisible step.

        Args:
            turns: Turns to append, in order

        Returns:
            The number of turns in the history after the append
        """
        batch = list(turns)
        async with self._lock:
            self._turns.extend(batch)
            count = len(self._turns)
        logger.debug(f"Appended {len(batch)} turn(s) to session {self.session_id}")
        return count

    async def snapshot(self) -> list[Turn]:
        """Get a copy of the history as it stands between appends."""
        async with self._lock:
            return list(self._turns)

    def summary(self) -> SessionSummary:
        return SessionSummary(
            session_id=self.session_id,
            created_at=self.created_at,
            turn_count=self.turn_count,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert session to a dictionary for JSON serialization.

        Returns:
            Dictionary representation of the session
        """
        return {
            "session_id": self.session_id,
            "created_at": self.created_at,
            "turn_count": self.turn_count,
            "history": [turn.to_dict() for turn in self._turns],
        }

    @staticmethod
    def generate_session_id() -> str:
        """Generate a new unique session ID.

        Returns:
            32-character hexadecimal string
        """
        return uuid.uuid4().hex
