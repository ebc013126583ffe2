"""Contract validation - structural and business-rule checks."""

from .validator import ContractValidator, Severity, ValidationResult, Violation, ViolationKind

__all__ = ["ContractValidator", "Severity", "ValidationResult", "Violation", "ViolationKind"]
