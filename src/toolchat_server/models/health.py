"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of toolchat-server.
        ollama_connected: Whether the Ollama server answered a connectivity check.
        ollama_host: The Ollama host URL.
        provider_connected: Whether the capability provider channel is open.
        tool_count: Number of tools in the registry snapshot.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of toolchat-server")
    ollama_connected: bool | None = Field(
        default=None,
        description="Whether Ollama is connected",
    )
    ollama_host: str | None = Field(
        default=None,
        description="Ollama host URL",
    )
    provider_connected: bool | None = Field(
        default=None,
        description="Whether the capability provider channel is open",
    )
    tool_count: int = Field(default=0, description="Number of registered tools")
