"""
Contract wire schema - Structural definition of a raw agent contract record.

The record is the flat key/value shape surfaced by contract sources
(AgentID, Name, Role, ...). ``ContractRecord`` is the single structural
definition shared by the registry mapper and the contract validator.
"""

import json
import logging
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Agent behaviour class."""
    SPECIALIST = "Specialist"
    WORKER = "Worker"
    MONITOR = "Monitor"
    MANAGER = "Manager"


class AutonomyLevel(str, Enum):
    """Ordered autonomy levels, Level 1 (guided) to Level 4 (self-improving)."""
    GUIDED = "Level 1 - Guided"
    SEMI_AUTONOMOUS = "Level 2 - Semi-Autonomous"
    AUTONOMOUS = "Level 3 - Autonomous"
    SELF_IMPROVING = "Level 4 - Self-Improving"

    @property
    def level(self) -> int:
        return int(self.value.split()[1])

    @classmethod
    def from_level(cls, level: int) -> "AutonomyLevel":
        for member in cls:
            if member.level == level:
                return member
        raise ValueError(f"Unknown autonomy level: {level}")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, AutonomyLevel):
            return NotImplemented
        return self.level < other.level


class ExecutionPattern(str, Enum):
    """How an agent carries out its work."""
    SEQUENTIAL = "Sequential"
    PARALLEL = "Parallel"
    RECURSIVE = "Recursive"
    BFS = "BFS"
    HYBRID = "Hybrid"


class AgentStatus(str, Enum):
    """Lifecycle status of a contract."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    MAINTENANCE = "Maintenance"


WIRE_FIELDS = (
    "AgentID",
    "Name",
    "Role",
    "Category",
    "AutonomyLevel",
    "ExecutionPattern",
    "MCPEnabled",
    "ToolSchema",
    "QualityScore",
    "Status",
    "VertexAIModel",
    "Architectures",
)


def parse_tool_schema(raw: Any) -> dict[str, Any]:
    """
    Parse a string-encoded tool schema.

    Never raises: anything that is not a JSON object degrades to ``{}``.
    """
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.debug(f"Unparseable tool schema, using empty schema: {e}")
        return {}
    return parsed if isinstance(parsed, dict) else {}


class ContractRecord(BaseModel):
    """
    Structural model of a raw contract record.

    The capability flag and quality score are strict: business rules key off
    the raw values, so coerced strings or integers would bypass them. The
    quality score range is a business rule.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    agent_id: str = Field(alias="AgentID", min_length=1)
    name: str = Field(alias="Name", min_length=1)
    role: Role = Field(alias="Role")
    category: str = Field(alias="Category")
    autonomy_level: AutonomyLevel = Field(alias="AutonomyLevel")
    execution_pattern: ExecutionPattern = Field(alias="ExecutionPattern")
    mcp_enabled: bool = Field(alias="MCPEnabled", strict=True)
    tool_schema: Union[str, dict[str, Any]] = Field(default="{}", alias="ToolSchema")
    quality_score: float = Field(alias="QualityScore", strict=True)
    status: AgentStatus = Field(alias="Status")
    vertex_ai_model: Optional[str] = Field(default=None, alias="VertexAIModel")
    architectures: list[str] = Field(default_factory=list, alias="Architectures")


def structural_errors(error: ValidationError) -> list[dict[str, str]]:
    """Flatten a pydantic ValidationError into ``{path, message}`` entries."""
    return [
        {
            "path": ".".join(str(part) for part in err["loc"]) or "root",
            "message": err["msg"],
        }
        for err in error.errors()
    ]
