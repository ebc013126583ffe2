"""
Swarm Host - Contract Dispatcher
================================

Executes a capability invocation against a generation backend:
- Resolves the contract's model to a cached client
- Builds the system preamble and task payload
- Invokes the backend under a timeout
- Returns a result value; backend failures never raise past ``execute``

No retry is performed here; retry policy belongs to the caller.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from ..registry.contract import AgentContract, ExecutionContext
from .clients import ModelClientCache
from .prompt import build_system_prompt, build_task_payload

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("swarm_host.dispatch")

NO_RESPONSE_TEXT = "No response generated."


class InvocationState(str, Enum):
    """Lifecycle of one invocation."""
    PENDING = "PENDING"
    INVOKING = "INVOKING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class ErrorCode(str, Enum):
    """Execution error codes."""
    BACKEND_ERROR = "BACKEND_ERROR"
    TIMEOUT = "TIMEOUT"


@dataclass(frozen=True)
class ExecutionError:
    """Failure of one invocation, scoped to one contract."""
    contract_id: str
    message: str
    code: ErrorCode = ErrorCode.BACKEND_ERROR

    def to_dict(self) -> dict[str, str]:
        return {"contractId": self.contract_id, "code": self.code.value, "message": self.message}


@dataclass(frozen=True)
class ExecutionResult:
    """Result of one invocation: generated text or a structured error."""
    contract_id: str
    state: InvocationState
    trace_id: str
    model: Optional[str] = None
    text: Optional[str] = None
    error: Optional[ExecutionError] = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.state == InvocationState.SUCCEEDED

    def to_tool_result(self) -> dict[str, Any]:
        """Render as a tool-invocation protocol result."""
        if self.ok:
            text = self.text or NO_RESPONSE_TEXT
        else:
            message = self.error.message if self.error else "unknown error"
            text = f"Error: Execution failed - {message}"
        return {"content": [{"type": "text", "text": text}], "isError": not self.ok}

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "contractId": self.contract_id,
            "state": self.state.value,
            "traceId": self.trace_id,
            "model": self.model,
            "durationMs": self.duration_ms,
        }
        if self.ok:
            result["text"] = self.text
        if self.error:
            result["error"] = self.error.to_dict()
        return result


class Dispatcher:
    """
    Routes contract invocations to generation backends.

    The only shared mutable state is the injected model client cache;
    invocations are otherwise independent and may run concurrently.
    """

    def __init__(self, cache: ModelClientCache, timeout_seconds: Optional[float] = 120.0):
        """
        Initialize the dispatcher.

        Args:
            cache: Model client cache, keyed by resolved model identifier
            timeout_seconds: Limit on one backend call; None disables it
        """
        self.cache = cache
        self.timeout_seconds = timeout_seconds

    async def execute(
        self,
        contract: AgentContract,
        task_input: Any,
        context: Optional[ExecutionContext] = None,
    ) -> ExecutionResult:
        """
        Execute a task against a contract.

        Args:
            contract: Contract describing the agent
            task_input: Caller-supplied arguments
            context: Execution context (a new one is created if omitted)

        Returns:
            ExecutionResult, SUCCEEDED with text or FAILED with an ExecutionError
        """
        context = context or ExecutionContext.new()
        start_time = time.monotonic()
        model = self.cache.resolve(contract.model_identifier)

        with tracer.start_as_current_span(
            "swarm.execute",
            attributes={
                "swarm.contract_id": contract.id,
                "swarm.contract_role": contract.role.value,
                "swarm.model": model,
                "swarm.trace_id": context.trace_id,
                "swarm.priority": context.priority.value,
            },
        ) as span:
            try:
                client = self.cache.get(contract.model_identifier)
                system_text = build_system_prompt(contract)
                task_text = build_task_payload(task_input, context)

                logger.info(f"Executing [{contract.id}] via {model} (trace={context.trace_id})")
                text = await asyncio.wait_for(
                    client.generate(system_text, task_text),
                    timeout=self.timeout_seconds,
                )

            except asyncio.TimeoutError:
                message = f"Backend call timed out after {self.timeout_seconds}s"
                logger.error(f"Execution timed out for {contract.id}: {message}")
                span.set_status(Status(StatusCode.ERROR, message))
                return self._failure(contract, context, model, start_time, message, ErrorCode.TIMEOUT)

            except Exception as e:
                logger.error(f"Execution failed for {contract.id}: {e}")
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                return self._failure(contract, context, model, start_time, str(e), ErrorCode.BACKEND_ERROR)

            if not text:
                logger.warning(f"Backend produced no text for {contract.id}")
                text = NO_RESPONSE_TEXT

            span.set_status(Status(StatusCode.OK))
            return ExecutionResult(
                contract_id=contract.id,
                state=InvocationState.SUCCEEDED,
                trace_id=context.trace_id,
                model=model,
                text=text,
                duration_ms=_elapsed_ms(start_time),
            )

    async def execute_many(
        self,
        requests: Iterable[tuple[AgentContract, Any]],
    ) -> list[ExecutionResult]:
        """Run several invocations concurrently; one result per request, in order."""
        return list(await asyncio.gather(
            *(self.execute(contract, task_input) for contract, task_input in requests)
        ))

    def _failure(
        self,
        contract: AgentContract,
        context: ExecutionContext,
        model: str,
        start_time: float,
        message: str,
        code: ErrorCode,
    ) -> ExecutionResult:
        return ExecutionResult(
            contract_id=contract.id,
            state=InvocationState.FAILED,
            trace_id=context.trace_id,
            model=model,
            error=ExecutionError(contract_id=contract.id, message=message, code=code),
            duration_ms=_elapsed_ms(start_time),
        )


def _elapsed_ms(start_time: float) -> float:
    return (time.monotonic() - start_time) * 1000
