"""
Capability Registrar - Binds enabled contracts to invocable tool handlers.

Each registration pass builds a complete binding table and swaps it in with
a single assignment. A handler captures its contract, so an invocation that
started before a swap finishes against the contract it started with.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional

from ..dispatch.executor import Dispatcher
from ..errors import RegistrationConflict
from ..registry.contract import AgentContract, ExecutionContext
from .capability import Capability, build_capability

logger = logging.getLogger(__name__)

ToolHandler = Callable[..., Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolBinding:
    """A registered tool: its capability and bound handler."""
    capability: Capability
    handler: ToolHandler


def error_tool_result(message: str) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": f"Error: {message}"}], "isError": True}


class CapabilityRegistrar:
    """
    Registers capabilities derived from contracts.

    Owns the tool name -> binding table and the contract id -> tool name
    index for the lifetime of the protocol server.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        tool_prefix: str = "execute_",
        on_change: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize the registrar.

        Args:
            dispatcher: Dispatcher used by every bound handler
            tool_prefix: Prefix prepended to derived tool names
            on_change: Callback invoked after a successful registration pass
        """
        self.dispatcher = dispatcher
        self.tool_prefix = tool_prefix
        self.on_change = on_change
        self._bindings: Mapping[str, ToolBinding] = MappingProxyType({})
        self._tool_names: Mapping[str, str] = MappingProxyType({})

    def register(self, contracts: Iterable[AgentContract]) -> Mapping[str, ToolHandler]:
        """
        Run one registration pass.

        Only capability-enabled contracts are bound. The pass defines the
        complete tool set: tools absent from it are unbound.

        Returns:
            Read-only mapping of tool name to handler

        Raises:
            RegistrationConflict: If two distinct contracts derive the same
                tool name; the previous bindings remain in effect
        """
        new_bindings: dict[str, ToolBinding] = {}
        owners: dict[str, str] = {}

        for contract in contracts:
            capability = build_capability(contract, self.tool_prefix)
            if not capability.exposed:
                continue

            name = capability.tool_name
            owner = owners.get(name)
            if owner is not None and owner != contract.id:
                logger.error(f"Registration aborted: tool '{name}' derived by {owner} and {contract.id}")
                raise RegistrationConflict(name, [owner, contract.id])
            owners[name] = contract.id

            previous = self._bindings.get(name)
            if previous is not None and previous.capability == capability:
                new_bindings[name] = previous
            else:
                new_bindings[name] = ToolBinding(capability, self._make_handler(capability))

        added = new_bindings.keys() - self._bindings.keys()
        removed = self._bindings.keys() - new_bindings.keys()
        replaced = [
            name for name in new_bindings.keys() & self._bindings.keys()
            if new_bindings[name] is not self._bindings[name]
        ]

        self._bindings = MappingProxyType(new_bindings)
        self._tool_names = MappingProxyType(owners_to_index(owners))

        logger.info(
            f"Registered {len(new_bindings)} tool(s): {len(added)} added, "
            f"{len(replaced)} replaced, {len(removed)} removed"
        )

        if self.on_change:
            self.on_change()

        return self.handlers()

    def _make_handler(self, capability: Capability) -> ToolHandler:
        """Bind a handler that delegates to the dispatcher with this contract captured."""
        contract = capability.contract
        dispatcher = self.dispatcher

        async def handler(
            arguments: Optional[dict[str, Any]] = None,
            context: Optional[ExecutionContext] = None,
        ) -> dict[str, Any]:
            logger.info(f"Delegating task to {contract.name} ({contract.id})")
            result = await dispatcher.execute(contract, arguments or {}, context)
            return result.to_tool_result()

        handler.__name__ = capability.tool_name
        return handler

    async def invoke(
        self,
        tool_name: str,
        arguments: Optional[dict[str, Any]] = None,
        context: Optional[ExecutionContext] = None,
    ) -> dict[str, Any]:
        """Invoke a tool by name. Unknown tools yield an error result."""
        binding = self._bindings.get(tool_name)
        if binding is None:
            logger.warning(f"Invocation of unknown tool: {tool_name}")
            return error_tool_result(f"Unknown tool: {tool_name}")
        return await binding.handler(arguments, context)

    def handlers(self) -> Mapping[str, ToolHandler]:
        return MappingProxyType({name: b.handler for name, b in self._bindings.items()})

    def lookup(self, tool_name: str) -> Optional[ToolBinding]:
        return self._bindings.get(tool_name)

    def tools(self) -> list[Capability]:
        """List registered capabilities, ordered by tool name."""
        return [self._bindings[name].capability for name in sorted(self._bindings)]

    def contract_for(self, tool_name: str) -> Optional[AgentContract]:
        binding = self._bindings.get(tool_name)
        return binding.capability.contract if binding else None

    def tool_name_for(self, contract_id: str) -> Optional[str]:
        return self._tool_names.get(contract_id)

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, tool_name: str) -> bool:
        return tool_name in self._bindings


def owners_to_index(owners: dict[str, str]) -> dict[str, str]:
    """Invert tool name -> contract id into contract id -> tool name."""
    return {contract_id: name for name, contract_id in owners.items()}
