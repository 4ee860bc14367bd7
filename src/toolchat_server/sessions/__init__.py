"""Session management for toolchat-server.

This package provides the in-memory session store, turn history types
and per-session append discipline.
"""

from toolchat_server.sessions.session import ChatSession
from toolchat_server.sessions.store import SessionStore
from toolchat_server.sessions.types import (
    TOOL_CALL_NOTE_PREFIX,
    TOOL_RESULT_PREFIX,
    Part,
    SessionSummary,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    Turn,
)

__all__ = [
    # Core classes
    "ChatSession",
    "SessionStore",
    # Turn types
    "Turn",
    "Part",
    "TextPart",
    "ToolCallPart",
    "ToolResultPart",
    "SessionSummary",
    "TOOL_CALL_NOTE_PREFIX",
    "TOOL_RESULT_PREFIX",
]
