"""Dispatch - model client cache, prompt construction and contract execution."""

from .clients import (
    GeminiClientFactory,
    GeminiModelClient,
    GenerationConfig,
    ModelClient,
    ModelClientCache,
)
from .executor import (
    NO_RESPONSE_TEXT,
    Dispatcher,
    ErrorCode,
    ExecutionError,
    ExecutionResult,
    InvocationState,
)
from .prompt import build_system_prompt, build_task_payload

__all__ = [
    "Dispatcher",
    "ErrorCode",
    "ExecutionError",
    "ExecutionResult",
    "GeminiClientFactory",
    "GeminiModelClient",
    "GenerationConfig",
    "InvocationState",
    "ModelClient",
    "ModelClientCache",
    "NO_RESPONSE_TEXT",
    "build_system_prompt",
    "build_task_payload",
]
