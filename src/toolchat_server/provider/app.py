"""FastAPI application factory for the capability provider."""

import logging

from fastapi import FastAPI

from toolchat_server.config import ToolchatSettings
from toolchat_server.provider.routes import mount_channel
from toolchat_server.provider.server import CapabilityServer
from toolchat_server.provider.tools import build_capability_server

logger = logging.getLogger(__name__)


def create_provider_app(
    settings: ToolchatSettings | None = None,
    server: CapabilityServer | None = None,
) -> FastAPI:
    """Create the capability provider application.

    Args:
        settings: Optional settings. If not provided, settings will be loaded
                  from environment variables.
        server: Optional capability server. If not provided, one with all
                built-in tools is created.

    Returns:
        FastAPI: Configured provider application.
    """
    if settings is None:
        from toolchat_server.dependencies import get_settings

        settings = get_settings()

    if server is None:
        server = build_capability_server(settings)

    app = FastAPI(
        title="toolchat-provider",
        description="Capability provider exposing tools over an SSE channel",
        version=server.version,
    )

    app.state.settings = settings
    app.state.capability_server = server
    app.state.transport = mount_channel(app, server)

    logger.info(f"Capability provider ready with tools: {', '.join(server.tool_names)}")
    return app
