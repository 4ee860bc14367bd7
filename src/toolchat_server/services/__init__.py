"""Business logic services for toolchat-server.

This package contains the conversation turn engine that interleaves model
inference with tool dispatch.
"""

from toolchat_server.services.conversation import (
    ConversationEngine,
    ConversationResult,
    ToolCallRecord,
    turns_to_ollama_messages,
)

__all__ = [
    "ConversationEngine",
    "ConversationResult",
    "ToolCallRecord",
    "turns_to_ollama_messages",
]
