"""Tools router for inspecting the registry snapshot."""

import logging

from fastapi import APIRouter, Depends

from toolchat_server.dependencies import get_tool_registry
from toolchat_server.models.tools import ToolListResponse, ToolResponse
from toolchat_server.tools import ToolRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["tools"])


@router.get("/tools", response_model=ToolListResponse)
async def list_tools(
    registry: ToolRegistry = Depends(get_tool_registry),
) -> ToolListResponse:
    """List the tools fetched from the capability provider at startup.

    Args:
        registry: The tool registry snapshot (injected).

    Returns:
        ToolListResponse: Name, description and parameter schema of each tool.
    """
    tools = [ToolResponse.model_validate(descriptor.to_dict()) for descriptor in registry]
    logger.debug(f"Listed {len(tools)} tools")
    return ToolListResponse(tools=tools)
