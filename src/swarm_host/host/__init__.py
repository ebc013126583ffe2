"""Host - capability registration and the MCP server."""

from .capability import Capability, CapabilityKind, build_capability, derive_tool_name, to_json_schema
from .registrar import CapabilityRegistrar, ToolBinding
from .server import SwarmHost, ToolCallFailed, build_host

__all__ = [
    "Capability",
    "CapabilityKind",
    "CapabilityRegistrar",
    "SwarmHost",
    "ToolBinding",
    "ToolCallFailed",
    "build_capability",
    "build_host",
    "derive_tool_name",
    "to_json_schema",
]
