"""Tool registry snapshot and the adapter that builds it.

The registry is fetched from the capability provider once, before the API
accepts any session traffic, and is read-only afterwards. Each remote
descriptor's input schema is copied structurally into the
``{type, properties, required}`` shape the inference call expects.
"""

import copy
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol

import anyio

from toolchat_server.errors import RegistryUnavailable

logger = logging.getLogger(__name__)


class ToolSource(Protocol):
    """What the adapter needs from a provider connection."""

    @property
    def connected(self) -> bool: ...

    async def connect(self) -> None: ...

    async def list_tools(self) -> list[Any]: ...


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool offered by the capability provider.

    Attributes:
        name: Tool name, unique within a registry snapshot
        description: Human-readable description shown to the model
        parameters: Argument schema with "type", "properties" and "required"
    """

    name: str
    description: str
    parameters: Mapping[str, Any] = field(default_factory=dict)

    @property
    def required(self) -> list[str]:
        return list(self.parameters.get("required", []))

    def to_model_schema(self) -> dict[str, Any]:
        """Render the descriptor in the inference call's function-tool format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": copy.deepcopy(dict(self.parameters)),
            },
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": copy.deepcopy(dict(self.parameters)),
        }

    @staticmethod
    def from_remote(tool: Any) -> "ToolDescriptor":
        """Translate a provider tool descriptor.

        Args:
            tool: Descriptor with name, description and inputSchema, either as
                  an object (mcp.types.Tool) or a dict

        Returns:
            ToolDescriptor: The translated descriptor

        Raises:
            ValueError: If the descriptor is malformed
        """
        if isinstance(tool, Mapping):
            name = tool.get("name")
            description = tool.get("description")
            schema = tool.get("inputSchema")
        else:
            name = getattr(tool, "name", None)
            description = getattr(tool, "description", None)
            schema = getattr(tool, "inputSchema", None)

        if not isinstance(name, str) or not name:
            raise ValueError(f"Tool descriptor without a name: {tool!r}")
        if not isinstance(schema, Mapping):
            raise ValueError(f"Tool {name} has no input schema")
        if "type" not in schema:
            raise ValueError(f"Tool {name} input schema has no type")

        properties = schema.get("properties", {})
        required = schema.get("required", [])
        if not isinstance(properties, Mapping):
            raise ValueError(f"Tool {name} properties must be an object")
        if not isinstance(required, list):
            raise ValueError(f"Tool {name} required must be a list")

        parameters = {
            "type": schema["type"],
            "properties": copy.deepcopy(dict(properties)),
            "required": list(required),
        }
        return ToolDescriptor(
            name=name,
            description=description or "",
            parameters=MappingProxyType(parameters),
        )


class ToolRegistry:
    """Immutable snapshot of the provider's tools, keyed by name."""

    def __init__(self, descriptors: list[ToolDescriptor]) -> None:
        tools: dict[str, ToolDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in tools:
                raise ValueError(f"Duplicate tool name: {descriptor.name}")
            tools[descriptor.name] = descriptor
        self._tools = MappingProxyType(tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def model_schemas(self) -> list[dict[str, Any]]:
        """All descriptors in the inference call's function-tool format."""
        return [descriptor.to_model_schema() for descriptor in self]


async def fetch_tools(source: ToolSource, timeout: float) -> ToolRegistry:
    """Fetch the tool registry snapshot from the capability provider.

    Connects the source if needed. The connection outlives this call, so
    only the listing runs under the deadline; the connect is bounded by the
    source itself. Any failure to reach the provider or to understand its
    descriptors is fatal for the caller.

    Args:
        source: Provider connection
        timeout: Upper bound in seconds for listing the tools

    Returns:
        ToolRegistry: The snapshot

    Raises:
        RegistryUnavailable: If the provider is unreachable, too slow, or
                             returned malformed descriptors
    """
    try:
        if not source.connected:
            await source.connect()
        with anyio.fail_after(timeout):
            remote_tools = await source.list_tools()
    except TimeoutError as e:
        raise RegistryUnavailable(
            f"Capability provider did not answer within {timeout}s"
        ) from e
    except Exception as e:
        raise RegistryUnavailable(f"Capability provider unreachable: {e}") from e

    try:
        registry = ToolRegistry(
            [ToolDescriptor.from_remote(tool) for tool in remote_tools]
        )
    except ValueError as e:
        raise RegistryUnavailable(f"Malformed tool descriptors: {e}") from e

    logger.info(f"Loaded {len(registry)} tools from capability provider")
    return registry
