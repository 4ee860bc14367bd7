"""Built-in tool handlers of the capability provider."""

from toolchat_server import __version__
from toolchat_server.config import ToolchatSettings
from toolchat_server.provider.server import CapabilityServer
from toolchat_server.provider.tools import arithmetic, filesystem, mail, system
from toolchat_server.provider.tools.mail import SmtpMailer


def build_capability_server(settings: ToolchatSettings) -> CapabilityServer:
    """Create a capability server with every built-in tool registered."""
    server = CapabilityServer(name="toolchat-provider", version=__version__)

    arithmetic.register(server)
    filesystem.register(server)
    system.register(server)
    mail.register(server, SmtpMailer.from_settings(settings))

    return server


__all__ = ["build_capability_server"]
