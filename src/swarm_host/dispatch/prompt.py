"""
Instruction payloads for contract execution.

Both builders are pure functions of their arguments.
"""

import json
from typing import Any, Optional

from ..registry.contract import AgentContract, ExecutionContext
from ..registry.schema import Role

ROLE_DIRECTIVES: dict[Role, str] = {
    Role.SPECIALIST: "Provide deep domain expertise for your category.",
    Role.WORKER: "Carry out the task exactly as specified and report the outcome.",
    Role.MONITOR: "Analyze the input and report findings, anomalies and status.",
    Role.MANAGER: "Break the task into steps, decide ownership and summarize the plan.",
}


def _dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def build_system_prompt(contract: AgentContract) -> str:
    """Build the system/role preamble for a contract."""
    output_format = contract.output_format or "JSON"

    lines = [
        f"YOU ARE AGENT: {contract.name} (ID: {contract.id})",
        f"ROLE: {contract.role.value}",
        f"CATEGORY: {contract.category}",
        f"AUTONOMY: {contract.autonomy_level.value}",
        f"EXECUTION PATTERN: {contract.execution_pattern.value}",
        "",
        f"YOUR CORE SKILLS: {_dumps(contract.invocation_schema)}",
        "",
        "MISSION:",
        "Execute tasks strictly according to your defined schema.",
        ROLE_DIRECTIVES[contract.role],
        "",
        "OUTPUT FORMAT:",
        f"Return {output_format} conforming to your output schema whenever possible.",
    ]
    return "\n".join(lines)


def build_task_payload(task_input: Any, context: Optional[ExecutionContext] = None) -> str:
    """Serialize the caller's input, with prior context fragments when present."""
    sections = []

    if context is not None:
        sections.append(f"PRIORITY: {context.priority.value}")
        if context.context_window:
            sections.append("CONTEXT:")
            sections.extend(f"- {fragment}" for fragment in context.context_window)

    sections.append(f"TASK_INPUT: {_dumps(task_input)}")
    return "\n".join(sections)
