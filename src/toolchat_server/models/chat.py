"""Pydantic models for chat API requests and responses.

This module defines the request and response schemas for the message
endpoint, which runs the model/tool loop for one user message.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from toolchat_server.models.sessions import TurnResponse


class ChatRequest(BaseModel):
    """Request body for POST /api/v1/chat.

    Both fields are declared optional so that a missing field is reported as
    a structured validation error rather than a schema error.
    """

    session_id: str | None = Field(
        default=None, description="The session to send the message to"
    )
    message: str | None = Field(default=None, description="The user message to send")

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "session_id": "3f2b9c1e8a7d4c6b9e0f1a2b3c4d5e6f",
                    "message": "add 2 and 3",
                },
            ]
        }
    )


class ToolCallResponse(BaseModel):
    """A tool invocation made while producing the reply."""

    name: str = Field(description="Tool name")
    args: Any = Field(description="Arguments exactly as produced by the model")


class ChatResponse(BaseModel):
    """Response body for POST /api/v1/chat."""

    session_id: str = Field(description="Session identifier")
    reply: str = Field(description="The model's final answer")
    tool_calls: list[ToolCallResponse] = Field(
        default_factory=list,
        description="Tool invocations made while producing the reply, in order",
    )
    history: list[TurnResponse] = Field(description="The updated full history")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "session_id": "3f2b9c1e8a7d4c6b9e0f1a2b3c4d5e6f",
                "reply": "2 plus 3 is 5.",
                "tool_calls": [{"name": "addTwoNumbers", "args": {"a": 2, "b": 3}}],
                "history": [
                    {"role": "user", "parts": [{"type": "text", "text": "add 2 and 3"}]},
                    {
                        "role": "model",
                        "parts": [
                            {
                                "type": "tool_call",
                                "text": "Calling tool: addTwoNumbers",
                                "name": "addTwoNumbers",
                                "args": {"a": 2, "b": 3},
                            }
                        ],
                    },
                    {
                        "role": "user",
                        "parts": [
                            {
                                "type": "tool_result",
                                "text": "Tool result: The sum of 2 and 3 is 5",
                                "name": "addTwoNumbers",
                            }
                        ],
                    },
                    {"role": "model", "parts": [{"type": "text", "text": "2 plus 3 is 5."}]},
                ],
            }
        }
    )
