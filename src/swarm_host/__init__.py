"""
Swarm Host

Contract-driven capability registry and task dispatcher. Agent contracts
are fetched from a registry source, validated, exposed as MCP tools and
executed against a generation backend.
"""

__version__ = "1.0.0"

from .config import SwarmConfig, load_config
from .dispatch import Dispatcher, ExecutionError, ExecutionResult, ModelClientCache
from .errors import (
    ConfigurationError,
    ContractMappingError,
    RegistrationConflict,
    SourceUnavailable,
    SwarmError,
)
from .host import CapabilityRegistrar, SwarmHost, build_host
from .registry import AgentContract, ContractRegistry, ExecutionContext
from .validation import ContractValidator, ValidationResult

__all__ = [
    "AgentContract",
    "CapabilityRegistrar",
    "ConfigurationError",
    "ContractMappingError",
    "ContractRegistry",
    "ContractValidator",
    "Dispatcher",
    "ExecutionContext",
    "ExecutionError",
    "ExecutionResult",
    "ModelClientCache",
    "RegistrationConflict",
    "SourceUnavailable",
    "SwarmConfig",
    "SwarmError",
    "SwarmHost",
    "ValidationResult",
    "build_host",
    "load_config",
]
