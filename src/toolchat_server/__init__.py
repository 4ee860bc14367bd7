"""toolchat-server: model conversations driven through remotely discovered tools.

This package provides a session API that runs a model/tool loop per user
message, and a capability provider that exposes tool handlers over an SSE
channel.
"""

__version__ = "0.1.0"

from toolchat_server.app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
