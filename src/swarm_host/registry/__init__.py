"""Contract Registry - Agent contracts, wire schema, sources and snapshots."""

from .schema import AgentStatus, AutonomyLevel, ContractRecord, ExecutionPattern, Role
from .contract import AgentContract, ExecutionContext, Priority
from .sources import (
    ContractSource,
    FileContractSource,
    InMemoryContractSource,
    NotionContractSource,
    SourcePage,
    create_source,
)
from .registry import ContractRegistry, RegistrySnapshot, SkippedRecord

__all__ = [
    "AgentContract",
    "AgentStatus",
    "AutonomyLevel",
    "ContractRecord",
    "ContractRegistry",
    "ContractSource",
    "ExecutionContext",
    "ExecutionPattern",
    "FileContractSource",
    "InMemoryContractSource",
    "NotionContractSource",
    "Priority",
    "RegistrySnapshot",
    "Role",
    "SkippedRecord",
    "SourcePage",
    "create_source",
]
