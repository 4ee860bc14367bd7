"""Pydantic models for session API requests and responses."""

from typing import Any

from pydantic import BaseModel, Field


class PartResponse(BaseModel):
    """A single content part of a turn."""

    type: str = Field(description="Part type: text, tool_call or tool_result")
    text: str = Field(description="Text rendering of the part")
    name: str | None = Field(
        default=None, description="Tool name for tool_call and tool_result parts"
    )
    args: dict[str, Any] | None = Field(
        default=None, description="Tool arguments for tool_call parts"
    )


class TurnResponse(BaseModel):
    """Response model for a single turn of the history."""

    role: str = Field(description="Turn role: user or model")
    parts: list[PartResponse]


class SessionResponse(BaseModel):
    """Response model for a single session (metadata only)."""

    session_id: str
    created_at: str
    turn_count: int


class SessionListResponse(BaseModel):
    """Response model for listing sessions."""

    sessions: list[SessionResponse]


class SessionHistoryResponse(BaseModel):
    """Response model for a session with its full turn history."""

    session_id: str
    created_at: str
    turn_count: int
    history: list[TurnResponse]
