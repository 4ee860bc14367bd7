"""Tool discovery, schema conversion, and dispatch layer.

This package holds the client side of the capability provider channel, the
registry snapshot built from the provider's descriptors, and the bridge that
forwards model-issued tool calls to the provider.
"""

from toolchat_server.tools.channel import ProviderChannel
from toolchat_server.tools.dispatch import ToolDispatchBridge, result_text
from toolchat_server.tools.registry import ToolDescriptor, ToolRegistry, fetch_tools

__all__ = [
    "ProviderChannel",
    "ToolDescriptor",
    "ToolDispatchBridge",
    "ToolRegistry",
    "fetch_tools",
    "result_text",
]
