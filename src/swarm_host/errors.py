"""
Swarm Host Errors - Exception taxonomy for registry, registration and config.

Execution failures are not exceptions: the dispatcher returns them as
``ExecutionError`` values so one agent's failure never escapes its invocation.
"""

from typing import Any, Optional


class SwarmError(Exception):
    """Base class for all swarm host errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SourceUnavailable(SwarmError):
    """The contract source could not deliver a complete snapshot."""


class RegistrationConflict(SwarmError):
    """Two distinct contracts derived the same tool name in one registration pass."""

    def __init__(self, tool_name: str, contract_ids: list[str]):
        super().__init__(
            f"Tool name '{tool_name}' is derived by multiple contracts: {', '.join(contract_ids)}",
            {"tool_name": tool_name, "contract_ids": contract_ids},
        )
        self.tool_name = tool_name
        self.contract_ids = contract_ids


class ContractMappingError(SwarmError):
    """A raw record could not be mapped into an AgentContract."""

    def __init__(self, message: str, errors: Optional[list[dict[str, str]]] = None):
        super().__init__(message, {"errors": errors or []})
        self.errors = errors or []


class ConfigurationError(SwarmError):
    """Invalid or missing configuration."""
