"""
Swarm Host Server - Exposes registered capabilities over MCP.

Wires the registry, registrar and dispatcher together and serves the
resulting tools on a stdio transport.
"""

import logging
from typing import Any, Optional

import mcp.types as types
from mcp.server.lowlevel import NotificationOptions, Server
from mcp.server.stdio import stdio_server

from ..config import SwarmConfig
from ..dispatch.clients import GeminiClientFactory, ModelClientCache
from ..dispatch.executor import Dispatcher
from ..errors import SwarmError
from ..registry.registry import ContractRegistry
from ..registry.sources import create_source
from ..validation.validator import ContractValidator
from .registrar import CapabilityRegistrar

logger = logging.getLogger(__name__)


class ToolCallFailed(SwarmError):
    """Raised inside the protocol adapter so the client receives an error result."""


class SwarmHost:
    """
    MCP server hosting one tool per capability-enabled contract.

    Usage:
        host = build_host(load_config())
        await host.initialize()
        await host.run_stdio()
    """

    def __init__(
        self,
        config: SwarmConfig,
        registry: ContractRegistry,
        registrar: CapabilityRegistrar,
    ):
        self.config = config
        self.registry = registry
        self.registrar = registrar
        self.server = Server(config.server.name, version=config.server.version)
        self._install_handlers()

    def _install_handlers(self) -> None:
        registrar = self.registrar

        @self.server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return [
                types.Tool(
                    name=capability.tool_name,
                    description=capability.description,
                    inputSchema=capability.input_schema,
                )
                for capability in registrar.tools()
            ]

        @self.server.call_tool()
        async def call_tool(name: str, arguments: Optional[dict[str, Any]]) -> list[types.TextContent]:
            result = await registrar.invoke(name, arguments or {})
            content = [
                types.TextContent(type="text", text=item.get("text", ""))
                for item in result.get("content", [])
            ]
            if result.get("isError"):
                raise ToolCallFailed("\n".join(c.text for c in content))
            return content

    async def initialize(self) -> int:
        """
        Fetch eligible contracts and register their capabilities.

        Returns:
            Number of registered tools
        """
        contracts = await self.registry.fetch_eligible_contracts()
        self.registrar.register(contracts)
        logger.info(f"Swarm host ready with {len(self.registrar)} tool(s) from {len(contracts)} contract(s)")
        return len(self.registrar)

    async def refresh(self) -> int:
        """
        Re-fetch contracts and run a new registration pass.

        On failure the previous bindings stay in effect and the error is re-raised.
        """
        try:
            return await self.initialize()
        except SwarmError as e:
            logger.error(f"Refresh failed, keeping {len(self.registrar)} existing tool(s): {e.message}")
            raise

    async def run_stdio(self) -> None:
        """Serve the protocol over stdin/stdout until the client disconnects."""
        options = self.server.create_initialization_options(
            notification_options=NotificationOptions(tools_changed=True),
        )
        logger.info(f"Starting {self.config.server.name} on stdio")
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(read_stream, write_stream, options)

    async def close(self) -> None:
        await self.registry.source.close()


def build_host(config: SwarmConfig) -> SwarmHost:
    """Assemble a host and its collaborators from configuration."""
    source = create_source(config.registry)
    validator = ContractValidator(config.validation)
    registry = ContractRegistry(source, validator, max_pages=config.registry.max_pages)

    cache = ModelClientCache(GeminiClientFactory(config.backend), config.backend.default_model)
    dispatcher = Dispatcher(cache, timeout_seconds=config.backend.timeout_seconds)
    registrar = CapabilityRegistrar(dispatcher, tool_prefix=config.server.tool_prefix)

    return SwarmHost(config, registry, registrar)
