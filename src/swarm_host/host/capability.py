"""
Capabilities - Runtime-exposed units derived from agent contracts.

``build_capability`` is a pure function of a contract, so capabilities can be
built and inspected without a live protocol transport.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..registry.contract import AgentContract

_WHITESPACE = re.compile(r"\s+")


class CapabilityKind(str, Enum):
    """Whether a capability is exposed over the protocol."""
    EXPOSED = "exposed"
    DISABLED = "disabled"


@dataclass(frozen=True)
class Capability:
    """A contract turned into an invocable (or deliberately hidden) tool."""
    kind: CapabilityKind
    tool_name: str
    description: str
    input_schema: dict[str, Any]
    contract: AgentContract

    @property
    def exposed(self) -> bool:
        return self.kind == CapabilityKind.EXPOSED

    @property
    def contract_id(self) -> str:
        return self.contract.id


def derive_tool_name(name: str, prefix: str = "execute_") -> str:
    """Lower-case the display name and replace whitespace runs with underscores."""
    return f"{prefix}{_WHITESPACE.sub('_', name.lower())}"


def to_json_schema(tool_input: Any) -> dict[str, Any]:
    """
    Convert a contract's declared input into a JSON Schema object.

    ``{"parameters": {...}, "required": [...]}`` becomes an object schema;
    an input that already declares a ``type`` is used as-is.
    """
    if not isinstance(tool_input, dict) or not tool_input:
        return {"type": "object"}

    if "type" in tool_input:
        return dict(tool_input)

    schema: dict[str, Any] = {"type": "object"}
    parameters = tool_input.get("parameters")
    if isinstance(parameters, dict):
        schema["properties"] = parameters
    required = tool_input.get("required")
    if isinstance(required, list) and required:
        schema["required"] = list(required)
    return schema


def describe_contract(contract: AgentContract) -> str:
    """Human-readable tool description shown to protocol clients."""
    description = contract.invocation_schema.get("description")
    summary = f"{contract.name} ({contract.role.value}, {contract.category})"
    if isinstance(description, str) and description.strip():
        return f"{summary}: {description.strip()}"
    return f"{summary}. Autonomy: {contract.autonomy_level.value}."


def build_capability(contract: AgentContract, prefix: str = "execute_") -> Capability:
    """Build the capability for a contract. Contracts with the capability flag off are DISABLED."""
    return Capability(
        kind=CapabilityKind.EXPOSED if contract.capability_enabled else CapabilityKind.DISABLED,
        tool_name=derive_tool_name(contract.name, prefix),
        description=describe_contract(contract),
        input_schema=to_json_schema(contract.invocation_schema.get("input")),
        contract=contract,
    )
