"""Pydantic models for tool registry API responses."""

from typing import Any

from pydantic import BaseModel, Field


class ToolResponse(BaseModel):
    """A tool from the registry snapshot."""

    name: str = Field(..., description="Tool name")
    description: str = Field(..., description="Human-readable description")
    parameters: dict[str, Any] = Field(
        ..., description="Argument schema with type, properties and required"
    )


class ToolListResponse(BaseModel):
    """Response model for listing the registry snapshot."""

    tools: list[ToolResponse] = Field(..., description="Available tools")
