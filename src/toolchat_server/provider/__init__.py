"""Capability provider: tool handlers exposed over a session-scoped SSE channel.

The provider runs as its own process. It registers tool handlers on a
CapabilityServer and serves them over the MCP SSE transport, one stream per
client.
"""

from toolchat_server.provider.server import (
    HANDLER_ERROR_PREFIX,
    CapabilityServer,
    ToolCallError,
    text_content,
)

__all__ = ["CapabilityServer", "HANDLER_ERROR_PREFIX", "ToolCallError", "text_content"]
