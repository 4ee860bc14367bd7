"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the session API application, including lifespan management for startup/shutdown
and router registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolchat_server import __version__
from toolchat_server.config import ToolchatSettings
from toolchat_server.errors import RegistryUnavailable
from toolchat_server.ollama import OllamaClient
from toolchat_server.routers import chat, health, sessions, tools
from toolchat_server.services import ConversationEngine
from toolchat_server.sessions import SessionStore
from toolchat_server.tools import ProviderChannel, ToolDispatchBridge, fetch_tools

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    Expensive objects (the Ollama client, the provider channel, the tool
    registry snapshot) are created once at startup and stored in app.state
    for reuse across all requests. If the tool registry cannot be fetched the
    application refuses to start.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.

    Raises:
        RegistryUnavailable: If the capability provider cannot be reached or
                             returns an unusable tool list.
    """
    settings: ToolchatSettings = app.state.settings

    # Startup: Initialize Ollama client
    ollama_client = OllamaClient(host=settings.ollama_host, headers=settings.ollama_headers)
    logger.info(f"Initialized Ollama client with host: {settings.ollama_host}")

    connected = await ollama_client.check_connection()
    if connected:
        logger.info("Successfully connected to Ollama")
    else:
        logger.warning("Could not connect to Ollama - check if server is running")

    # Startup: fetch the tool registry snapshot
    channel = ProviderChannel(settings.provider_url, timeout=settings.registry_timeout)
    try:
        registry = await fetch_tools(channel, settings.registry_timeout)
    except RegistryUnavailable as e:
        logger.error(f"Tool registry unavailable at {settings.provider_url}: {e}")
        await channel.close()
        await ollama_client.close()
        raise
    logger.info(f"Loaded {len(registry)} tools: {', '.join(registry.names)}")

    store = SessionStore()
    bridge = ToolDispatchBridge(channel, registry, timeout=settings.tool_timeout)

    app.state.ollama_client = ollama_client
    app.state.provider_channel = channel
    app.state.tool_registry = registry
    app.state.session_store = store
    app.state.tool_dispatch = bridge
    app.state.conversation_engine = ConversationEngine(
        store=store,
        ollama_client=ollama_client,
        bridge=bridge,
        registry=registry,
        model=settings.model,
        max_tool_rounds=settings.max_tool_rounds,
        model_timeout=settings.model_timeout,
    )

    yield

    # Shutdown: Clean up resources
    await channel.close()
    logger.info("Provider channel closed")
    await ollama_client.close()
    logger.info("Ollama client closed")


def create_app(settings: ToolchatSettings | None = None) -> FastAPI:
    """Create and configure the session API application.

    Args:
        settings: Optional ToolchatSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from toolchat_server.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="toolchat-server",
        description="Session API driving model conversations with remote tools",
        version=__version__,
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(sessions.router)
    app.include_router(chat.router)
    app.include_router(tools.router)

    return app
