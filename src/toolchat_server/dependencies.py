"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject the objects created once in the app lifespan.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from toolchat_server.config import ToolchatSettings
from toolchat_server.ollama import OllamaClient
from toolchat_server.services import ConversationEngine
from toolchat_server.sessions import SessionStore
from toolchat_server.tools import ToolRegistry


@lru_cache
def get_settings() -> ToolchatSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the TOOLCHAT_ prefix.

    Returns:
        ToolchatSettings: The application configuration settings.
    """
    return ToolchatSettings()


def _from_state(request: Request, name: str, label: str):
    if not hasattr(request.app.state, name):
        raise HTTPException(
            status_code=503,
            detail={
                "error": {
                    "code": "service_unavailable",
                    "message": f"{label} not initialized",
                    "details": {},
                }
            },
        )
    return getattr(request.app.state, name)


def get_ollama_client(request: Request) -> OllamaClient:
    """Get the Ollama client from app state.

    Raises:
        HTTPException: If the Ollama client is not initialized (503 Service Unavailable).
    """
    return _from_state(request, "ollama_client", "Ollama client")


def get_session_store(request: Request) -> SessionStore:
    """Get the process-wide SessionStore from app state.

    Raises:
        HTTPException: If the store is not initialized (503 Service Unavailable).
    """
    return _from_state(request, "session_store", "Session store")


def get_tool_registry(request: Request) -> ToolRegistry:
    """Get the tool registry snapshot fetched at startup.

    Raises:
        HTTPException: If the registry is not loaded (503 Service Unavailable).
    """
    return _from_state(request, "tool_registry", "Tool registry")


def get_conversation_engine(request: Request) -> ConversationEngine:
    """Get the conversation engine from app state.

    Raises:
        HTTPException: If the engine is not initialized (503 Service Unavailable).
    """
    return _from_state(request, "conversation_engine", "Conversation engine")
