"""Configuration module for toolchat-server using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ToolchatSettings(BaseSettings):
    """Main configuration settings for toolchat-server.

    All settings can be overridden via environment variables with the TOOLCHAT_
    prefix. For example, TOOLCHAT_OLLAMA_HOST will override the ollama_host
    setting.
    """

    # Session API server
    host: str = "127.0.0.1"
    port: int = 3002

    # Capability provider server
    provider_host: str = "127.0.0.1"
    provider_port: int = 3001

    # SSE endpoint the API process connects to for tool discovery and dispatch
    provider_url: str = "http://localhost:3001/sse"

    # Ollama
    ollama_host: str = "http://localhost:11434"
    ollama_api_key: str | None = None
    model: str = "llama3.2:latest"

    # Timeouts in seconds
    model_timeout: float = 120.0
    tool_timeout: float = 60.0
    registry_timeout: float = 10.0

    # Upper bound on inference rounds for a single user message
    max_tool_rounds: int = 10

    # Outbound mail relay used by the e-mail tools
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_secure: bool = False

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="TOOLCHAT_", protected_namespaces=())

    @property
    def ollama_headers(self) -> dict[str, str] | None:
        """Get the authorization headers for the inference provider, if any."""
        if not self.ollama_api_key:
            return None
        return {"Authorization": f"Bearer {self.ollama_api_key}"}
