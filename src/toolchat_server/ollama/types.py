"""Type definitions for Ollama integration.

This module contains dataclasses used for representing a collected model
reply: either final text or the tool calls the model asked for.
"""

from dataclasses import dataclass, field
from typing import Any


def _get_value(obj: Any, key: str, default: Any = None) -> Any:
    """Get a value from either an object attribute or a dict key."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    if hasattr(obj, key):
        return getattr(obj, key, default)
    return default


@dataclass
class ModelToolCall:
    """A single tool call requested by the model.

    Attributes:
        name: Name of the requested tool
        arguments: Arguments exactly as produced by the model. Usually a
                   mapping, but left untouched so that malformed arguments
                   can be reported by the dispatch layer.
    """

    name: str
    arguments: Any

    @staticmethod
    def from_ollama(tool_call: Any) -> "ModelToolCall":
        """Create a ModelToolCall from an Ollama tool call entry.

        Args:
            tool_call: Raw tool call (dict or object) from a chat chunk

        Returns:
            ModelToolCall: Parsed tool call
        """
        function = _get_value(tool_call, "function", {})
        return ModelToolCall(
            name=_get_value(function, "name", "") or "",
            arguments=_get_value(function, "arguments", {}),
        )


@dataclass
class ModelReply:
    """A complete reply collected from a streamed chat response.

    Attributes:
        content: Concatenated text content of all chunks
        tool_calls: Tool calls found in any chunk, in arrival order
        eval_count: Tokens generated (from the final chunk)
        prompt_eval_count: Tokens in the prompt (from the final chunk)
    """

    content: str = ""
    tool_calls: list[ModelToolCall] = field(default_factory=list)
    eval_count: int | None = None
    prompt_eval_count: int | None = None

    @property
    def tool_call(self) -> ModelToolCall | None:
        """The tool call to act on this round, if any."""
        return self.tool_calls[0] if self.tool_calls else None

    @property
    def is_empty(self) -> bool:
        """True if the reply holds neither a tool call nor any text."""
        return not self.tool_calls and not self.content.strip()

    @staticmethod
    def from_chunks(chunks: list[dict[str, Any]]) -> "ModelReply":
        """Assemble a ModelReply from streamed Ollama chat chunks.

        Args:
            chunks: Chunk dicts as yielded by OllamaClient.chat_stream

        Returns:
            ModelReply: The collected reply
        """
        reply = ModelReply()
        content_parts: list[str] = []

        for chunk in chunks:
            message = _get_value(chunk, "message", {}) or {}
            content = _get_value(message, "content", "")
            if content:
                content_parts.append(content)

            for tool_call in _get_value(message, "tool_calls", None) or []:
                reply.tool_calls.append(ModelToolCall.from_ollama(tool_call))

            if _get_value(chunk, "done"):
                reply.eval_count = _get_value(chunk, "eval_count")
                reply.prompt_eval_count = _get_value(chunk, "prompt_eval_count")

        reply.content = "".join(content_parts)
        return reply
