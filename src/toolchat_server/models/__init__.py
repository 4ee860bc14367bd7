"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from toolchat_server.models.chat import ChatRequest, ChatResponse, ToolCallResponse
from toolchat_server.models.health import HealthResponse
from toolchat_server.models.sessions import (
    PartResponse,
    SessionHistoryResponse,
    SessionListResponse,
    SessionResponse,
    TurnResponse,
)
from toolchat_server.models.tools import ToolListResponse, ToolResponse

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "HealthResponse",
    "PartResponse",
    "SessionHistoryResponse",
    "SessionListResponse",
    "SessionResponse",
    "ToolCallResponse",
    "ToolListResponse",
    "ToolResponse",
    "TurnResponse",
]
