"""Ollama client wrapper and integration layer.

This package provides async client wrappers for communicating with the Ollama API.
All Ollama interactions are async and use streaming by default.
"""

from toolchat_server.ollama.client import OllamaClient
from toolchat_server.ollama.types import ModelReply, ModelToolCall

__all__ = ["OllamaClient", "ModelReply", "ModelToolCall"]
