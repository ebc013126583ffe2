"""
Swarm Host - Contract Validator
===============================

Validates raw agent contract records. Validation is two-layered:
- Structural: required fields present, correctly typed, enums known
- Business rules: cross-field constraints, each evaluated independently

Errors block registration; warnings are reported but do not. A result
always carries the full list of violations, never a single boolean.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from ..config import ValidationConfig
from ..registry.contract import AgentContract
from ..registry.schema import (
    ContractRecord,
    ExecutionPattern,
    Role,
    parse_tool_schema,
    structural_errors,
)

logger = logging.getLogger(__name__)

RECURSIVE_PATTERNS = (ExecutionPattern.RECURSIVE.value, ExecutionPattern.HYBRID.value)


class Severity(str, Enum):
    """How a configurable rule reports a violation."""
    ERROR = "error"
    WARNING = "warning"
    IGNORE = "ignore"


class ViolationKind(str, Enum):
    """Which validation layer produced a violation."""
    SCHEMA = "schema"
    BUSINESS = "business"


@dataclass
class Violation:
    """A single validation finding."""
    path: str
    message: str
    kind: ViolationKind = ViolationKind.SCHEMA

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message, "type": self.kind.value}


@dataclass
class ValidationResult:
    """Result of validating one contract record."""
    valid: bool = True
    errors: list[Violation] = field(default_factory=list)
    warnings: list[Violation] = field(default_factory=list)
    agent_id: Optional[str] = None

    def add_error(self, path: str, message: str, kind: ViolationKind = ViolationKind.BUSINESS) -> None:
        """Add a validation error."""
        self.valid = False
        self.errors.append(Violation(path=path, message=message, kind=kind))

    def add_warning(self, path: str, message: str, kind: ViolationKind = ViolationKind.BUSINESS) -> None:
        """Add a validation warning."""
        self.warnings.append(Violation(path=path, message=message, kind=kind))

    def add(self, severity: Severity, path: str, message: str) -> None:
        if severity == Severity.ERROR:
            self.add_error(path, message)
        elif severity == Severity.WARNING:
            self.add_warning(path, message)

    def merge(self, other: "ValidationResult") -> None:
        """Merge another validation result into this one."""
        if not other.valid:
            self.valid = False
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def error_paths(self) -> list[str]:
        return [e.path for e in self.errors]

    def to_dict(self) -> dict[str, Any]:
        return {
            "agentId": self.agent_id,
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


class ContractValidator:
    """
    Validates agent contract records.

    Business rules:
    1. Capability-enabled contracts declare ``input`` and ``output.format``
    2. Recursive/Hybrid patterns without the recursion architecture tag warn
    3. Quality score outside [0, 1] is an error
    4. Capability-enabled contracts need a valid execution role
    5. Capability-enabled contracts without the capability architecture tag
       are reported at the configured severity
    """

    def __init__(self, config: Optional[ValidationConfig] = None):
        self.config = config or ValidationConfig()
        self.capability_tag_severity = Severity(self.config.capability_tag_severity)

    def validate(self, raw: Union[dict[str, Any], AgentContract]) -> ValidationResult:
        """
        Validate a contract record.

        Args:
            raw: Wire record, or an already-mapped AgentContract

        Returns:
            ValidationResult with errors and warnings
        """
        record = raw.to_wire() if isinstance(raw, AgentContract) else raw
        result = ValidationResult()

        if not isinstance(record, dict):
            result.add_error("root", "Contract record must be an object", ViolationKind.SCHEMA)
            return result

        agent_id = record.get("AgentID")
        result.agent_id = agent_id if isinstance(agent_id, str) else None

        self._validate_structure(record, result)

        # Business rules run regardless of structural outcome
        self._validate_tool_schema(record, result)
        self._validate_execution_pattern(record, result)
        self._validate_quality_score(record, result)
        self._validate_execution_role(record, result)
        self._validate_capability_tag(record, result)

        if result.errors:
            logger.debug(f"Contract {result.agent_id} has {len(result.errors)} error(s)")

        return result

    def validate_batch(self, records: Iterable[Any]) -> dict[str, ValidationResult]:
        """
        Validate many records. One record's failure never stops the batch.

        Returns:
            Results keyed by AgentID, or ``record[<index>]`` when the id is unusable
        """
        results: dict[str, ValidationResult] = {}

        for index, record in enumerate(records):
            result = self.validate(record)
            key = result.agent_id or f"record[{index}]"
            if key in results:
                key = f"{key}[{index}]"
            results[key] = result

        return results

    def _validate_structure(self, record: dict[str, Any], result: ValidationResult) -> None:
        """Validate required fields, types and enumerations."""
        try:
            ContractRecord.model_validate(record)
        except ValidationError as e:
            for err in structural_errors(e):
                result.add_error(err["path"], err["message"], ViolationKind.SCHEMA)

    def _validate_tool_schema(self, record: dict[str, Any], result: ValidationResult) -> None:
        """Capability-enabled contracts must declare input and output format."""
        if record.get("MCPEnabled") is not True:
            return

        schema = parse_tool_schema(record.get("ToolSchema"))

        tool_input = schema.get("input")
        if not tool_input:
            result.add_error(
                "ToolSchema.input",
                "Capability-enabled contracts must define tool schema input",
            )

        output = schema.get("output")
        if not isinstance(output, dict) or not output.get("format"):
            result.add_error(
                "ToolSchema.output.format",
                "Capability-enabled contracts must define tool schema output format",
            )

    def _validate_execution_pattern(self, record: dict[str, Any], result: ValidationResult) -> None:
        """Recursive patterns typically depend on the recursion architecture."""
        pattern = record.get("ExecutionPattern")
        if pattern not in RECURSIVE_PATTERNS:
            return

        if self.config.recursion_tag not in _architectures(record):
            result.add_warning(
                "ExecutionPattern",
                f"{pattern} pattern typically requires {self.config.recursion_tag} architecture",
            )

    def _validate_quality_score(self, record: dict[str, Any], result: ValidationResult) -> None:
        """Quality score must lie in [0, 1]; it is never clamped."""
        score = record.get("QualityScore")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            return

        if math.isnan(score) or score < 0 or score > 1:
            result.add_error(
                "QualityScore",
                f"Quality score must be between 0 and 1, got {score}",
            )

    def _validate_execution_role(self, record: dict[str, Any], result: ValidationResult) -> None:
        """Capability-enabled contracts need a role to execute as."""
        if record.get("MCPEnabled") is not True:
            return

        if record.get("Role") not in {r.value for r in Role}:
            result.add_error(
                "Role",
                "Capability-enabled contracts must declare an execution role",
            )

    def _validate_capability_tag(self, record: dict[str, Any], result: ValidationResult) -> None:
        """Capability-enabled contracts are expected to carry the capability architecture tag."""
        if record.get("MCPEnabled") is not True:
            return

        tag = self.config.capability_tag
        if tag not in _architectures(record):
            result.add(
                self.capability_tag_severity,
                "Architectures",
                f"Capability-enabled agents should include {tag} in architectures",
            )


def _architectures(record: dict[str, Any]) -> list[str]:
    tags = record.get("Architectures") or []
    return [t for t in tags if isinstance(t, str)] if isinstance(tags, list) else []
