"""
Agent Contract - Validated definition of one agent capability.

A contract is built from a flat wire record, carries the parsed invocation
schema, and maps back to the same wire record without loss.
"""

import json
import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from ..errors import ContractMappingError
from .schema import (
    AgentStatus,
    AutonomyLevel,
    ContractRecord,
    ExecutionPattern,
    Role,
    parse_tool_schema,
    structural_errors,
)


@dataclass(frozen=True)
class AgentContract:
    """
    Agent contract.

    Defines the agent's identity, behaviour class and invocation shape.
    ``invocation_schema`` is parsed once when the contract is built and must
    not be mutated afterwards.
    """
    id: str
    name: str
    role: Role
    category: str
    autonomy_level: AutonomyLevel
    execution_pattern: ExecutionPattern
    capability_enabled: bool
    invocation_schema: dict[str, Any] = field(default_factory=dict)
    quality_score: float = 0.0
    status: AgentStatus = AgentStatus.ACTIVE
    model_identifier: Optional[str] = None
    architectures: tuple[str, ...] = ()

    @classmethod
    def from_record(cls, record: ContractRecord) -> "AgentContract":
        return cls(
            id=record.agent_id,
            name=record.name,
            role=record.role,
            category=record.category,
            autonomy_level=record.autonomy_level,
            execution_pattern=record.execution_pattern,
            capability_enabled=record.mcp_enabled,
            invocation_schema=parse_tool_schema(record.tool_schema),
            quality_score=record.quality_score,
            status=record.status,
            model_identifier=record.vertex_ai_model,
            architectures=tuple(record.architectures),
        )

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "AgentContract":
        """
        Map a raw wire record into a contract.

        Raises:
            ContractMappingError: If a required property is missing or malformed
        """
        if not isinstance(data, dict):
            raise ContractMappingError(f"Contract record must be a mapping, got {type(data).__name__}")
        try:
            record = ContractRecord.model_validate(data)
        except ValidationError as e:
            errors = structural_errors(e)
            summary = "; ".join(f"{err['path']}: {err['message']}" for err in errors)
            raise ContractMappingError(
                f"Cannot map contract {data.get('AgentID', '<unknown>')}: {summary}",
                errors,
            ) from e
        return cls.from_record(record)

    def to_wire(self) -> dict[str, Any]:
        """Convert contract to its flat wire record."""
        wire: dict[str, Any] = {
            "AgentID": self.id,
            "Name": self.name,
            "Role": self.role.value,
            "Category": self.category,
            "AutonomyLevel": self.autonomy_level.value,
            "ExecutionPattern": self.execution_pattern.value,
            "MCPEnabled": self.capability_enabled,
            "ToolSchema": json.dumps(self.invocation_schema, sort_keys=True),
            "QualityScore": self.quality_score,
            "Status": self.status.value,
            "Architectures": list(self.architectures),
        }
        if self.model_identifier is not None:
            wire["VertexAIModel"] = self.model_identifier
        return wire

    @property
    def is_active(self) -> bool:
        return self.status == AgentStatus.ACTIVE

    @property
    def input_schema(self) -> dict[str, Any]:
        value = self.invocation_schema.get("input")
        return value if isinstance(value, dict) else {}

    @property
    def output_format(self) -> Optional[str]:
        output = self.invocation_schema.get("output")
        if isinstance(output, dict) and output.get("format"):
            return str(output["format"])
        return None

    def has_architecture(self, tag: str) -> bool:
        return tag in self.architectures


class Priority(str, Enum):
    """Invocation priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class ExecutionContext:
    """Per-invocation context owned by the dispatcher."""
    trace_id: str
    priority: Priority = Priority.MEDIUM
    context_window: list[str] = field(default_factory=list)

    @classmethod
    def new(
        cls,
        priority: Priority = Priority.MEDIUM,
        context_window: Optional[list[str]] = None,
    ) -> "ExecutionContext":
        return cls(
            trace_id=secrets.token_hex(16),
            priority=priority,
            context_window=list(context_window or []),
        )
