"""Data types for session management.

This module defines the core data structures for chat sessions: turns and
the content parts they are made of.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["user", "model"]

TOOL_CALL_NOTE_PREFIX = "Calling tool: "
TOOL_RESULT_PREFIX = "Tool result: "


@dataclass(frozen=True)
class TextPart:
    """Plain text content."""

    text: str
    type: str = field(default="text", init=False)

    def render(self) -> str:
        return self.text

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ToolCallPart:
    """A structured record of a tool the model asked to invoke."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)
    type: str = field(default="tool_call", init=False)

    def render(self) -> str:
        return f"{TOOL_CALL_NOTE_PREFIX}{self.name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "text": self.render(),
            "name": self.name,
            "args": dict(self.args),
        }


@dataclass(frozen=True)
class ToolResultPart:
    """The textual result of a tool invocation, injected back into history."""

    name: str
    text: str
    type: str = field(default="tool_result", init=False)

    def render(self) -> str:
        return f"{TOOL_RESULT_PREFIX}{self.text}"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.render(), "name": self.name}


Part = TextPart | ToolCallPart | ToolResultPart


@dataclass(frozen=True)
class Turn:
    """One role-tagged entry in a session's history.

    Turns are immutable; history only ever grows by appending new turns.
    """

    role: Role
    parts: tuple[Part, ...]

    @classmethod
    def user_text(cls, text: str) -> "Turn":
        return cls(role="user", parts=(TextPart(text),))

    @classmethod
    def model_text(cls, text: str) -> "Turn":
        return cls(role="model", parts=(TextPart(text),))

    @classmethod
    def tool_call(cls, name: str, args: dict[str, Any]) -> "Turn":
        return cls(role="model", parts=(ToolCallPart(name=name, args=dict(args)),))

    @classmethod
    def tool_result(cls, name: str, text: str) -> "Turn":
        # Tool output is injected with the user role to keep a two-role history
        return cls(role="user", parts=(ToolResultPart(name=name, text=text),))

    @property
    def text(self) -> str:
        """All parts rendered as text and joined with newlines."""
        return "\n".join(part.render() for part in self.parts)

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "parts": [part.to_dict() for part in self.parts]}


@dataclass(frozen=True)
class SessionSummary:
    """Listing entry for a session."""

    session_id: str
    created_at: str
    turn_count: int
