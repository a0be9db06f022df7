"""
OperationGateway
================

Single entry point for invoking a remote operation by id.

    health gate → input parsing → parameter validation
        → mutation detection / audit → timed dispatch → normalization

`invoke()` never raises: every failure, at every step, is converted into a
`Failure` carrying a FailureClassification. `invoke_response()` returns the
wire shape ({"isError"?, "content": [{"type": "text", "text": ...}]}).

Timeout semantics
~~~~~~~~~~~~~~~~~
The dispatch task is raced against `settings.timeout_ms`. When the timer
wins the caller gets a TimeoutError failure straight away; the dispatch is
left running and its eventual outcome is discarded (logged at debug level).
Set `settings.cancel_on_timeout` to cancel it instead.

Blocking (non-coroutine) executors run on a thread pool owned by the
gateway, not on the loop's default executor, so shutting the loop down
never waits for an abandoned call. `close()` releases the pool.

Layer:  core.services
"""

from __future__ import annotations

import asyncio
import contextvars
import functools
import inspect
import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Mapping, Sequence, Set

from opgate.core.config.settings import Settings
from opgate.core.exceptions import (
    ComponentUnavailableError,
    InputValidationError,
    OperationTimeoutError,
)
from opgate.core.interfaces import (
    HealthRegistry,
    IdentityProvider,
    OperationRepository,
    ParameterValidator,
    RemoteCallExecutor,
    Sanitizer,
)
from opgate.core.models import (
    Failure,
    InvocationRequest,
    InvocationResult,
    ParsedRequest,
    Success,
    ValidationOutcome,
)
from opgate.core.services.audit_emitter import AuditTrailEmitter
from opgate.core.services.failure_classifier import FailureClassifier
from opgate.core.services.health_gate import (
    DEFAULT_CRITICAL_COMPONENTS,
    CriticalComponent,
    HealthGate,
)
from opgate.core.utils.aio import resolve
from opgate.core.utils.correlation import correlation_scope, current_context, current_trace_id
from opgate.core.utils.logging import emit
from opgate.core.utils.sanitizer import redact_params

log = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════════════
#                           INPUT PARSING
# ════════════════════════════════════════════════════════════════════════
def parse_parameters(raw: Any) -> Dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InputValidationError(f"Invalid JSON string: {exc}") from exc
        raw = decoded
    if not isinstance(raw, Mapping):
        raise InputValidationError("Parameters must be a JSON object")
    return dict(raw)


def parse_request(request: InvocationRequest) -> ParsedRequest:
    if not isinstance(request, InvocationRequest):
        raise InputValidationError("Request must provide operation_id and parameters")
    op_id = request.operation_id
    if op_id is None:
        raise InputValidationError("operation_id is required")
    if not isinstance(op_id, str):
        raise InputValidationError("operation_id must be a string")
    if op_id == "":
        raise InputValidationError("operation_id cannot be empty")
    return ParsedRequest(operation_id=op_id, parameters=parse_parameters(request.parameters))


def critical_components_for(names: Sequence[str]) -> tuple[CriticalComponent, ...]:
    known = {c.name: c for c in DEFAULT_CRITICAL_COMPONENTS}
    return tuple(
        known.get(name) or CriticalComponent(name, f"{name} unavailable", f"Check {name} health")
        for name in names
    )


def as_validation_outcome(value: Any) -> ValidationOutcome:
    """Validators may hand back a ValidationOutcome or a {success, data|errors} mapping."""
    if isinstance(value, ValidationOutcome):
        return value
    if isinstance(value, Mapping) and "success" in value:
        if value["success"]:
            return ValidationOutcome.ok(value.get("data"))
        return ValidationOutcome.failed(value.get("errors") or [])
    raise TypeError(f"Validator returned unsupported result {type(value).__name__}")


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


# ════════════════════════════════════════════════════════════════════════
#                              GATEWAY
# ════════════════════════════════════════════════════════════════════════
class OperationGateway:

    def __init__(
        self,
        validator: ParameterValidator,
        operations: OperationRepository,
        executor: RemoteCallExecutor,
        identity: IdentityProvider | None = None,
        *,
        settings: Settings | None = None,
        registry: HealthRegistry | None = None,
        sanitizer: Sanitizer = redact_params,
        classifier: FailureClassifier | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.validator = validator
        self.operations = operations
        self.executor = executor

        self.health_gate = HealthGate(
            registry, critical_components_for(self.settings.critical_components)
        )
        self.classifier = classifier or FailureClassifier(self.settings.remote_name)
        self.audit = AuditTrailEmitter(
            identity,
            operations,
            remote_base_url=self.settings.remote_base_url,
            sanitizer=sanitizer,
        )
        # abandoned dispatches; referenced so they are not garbage-collected
        self._background: Set[asyncio.Task] = set()
        self._pool: ThreadPoolExecutor | None = None

    # ---------------------------------------------------------------- public
    @property
    def pending_dispatches(self) -> int:
        return len(self._background)

    async def invoke(self, request: InvocationRequest | Mapping[str, Any]) -> InvocationResult:
        if current_context() is None:
            with correlation_scope():
                return await self._invoke(request)
        return await self._invoke(request)

    async def invoke_response(self, request: InvocationRequest | Mapping[str, Any]) -> Dict[str, Any]:
        return (await self.invoke(request)).to_response()

    def close(self) -> None:
        """Release the blocking-executor pool without waiting for abandoned calls."""
        if self._pool is not None:
            self._pool.shutdown(wait=False, cancel_futures=True)
            self._pool = None

    # ---------------------------------------------------------------- pipeline
    async def _invoke(self, request: Any) -> InvocationResult:
        started = time.monotonic()
        trace_id = current_trace_id()
        operation_id: str | None = None

        try:
            if isinstance(request, Mapping):
                request = InvocationRequest.from_mapping(request)
            if isinstance(request, InvocationRequest) and isinstance(request.operation_id, str):
                operation_id = request.operation_id

            # 1. health gate
            try:
                self.health_gate.ensure_available(trace_id=trace_id, operation_id=operation_id)
            except ComponentUnavailableError as exc:
                return Failure(
                    self.classifier.classify_unavailable(
                        exc,
                        operation_id=operation_id,
                        trace_id=trace_id,
                        latency_ms=_elapsed_ms(started),
                    )
                )

            # 2. input parsing
            parsed = parse_request(request)
            operation_id = parsed.operation_id
            emit(
                log, logging.INFO, "invocation.start", "Executing remote operation",
                trace_id=trace_id, operation_id=operation_id,
            )
            emit(
                log, logging.DEBUG, "invocation.parameters_received",
                "Parameters received before validation",
                trace_id=trace_id, operation_id=operation_id,
                parameter_keys=sorted(parsed.parameters),
            )

            # 3. operation-specific validation
            outcome = as_validation_outcome(
                await resolve(self.validator.validate(operation_id, parsed.parameters))
            )
            emit(
                log, logging.DEBUG, "invocation.validation_result", "Validation completed",
                trace_id=trace_id, operation_id=operation_id, success=outcome.success,
            )
            if not outcome.success:
                return Failure(
                    self.classifier.classify_validation(
                        outcome.errors,
                        operation_id=operation_id,
                        trace_id=trace_id,
                        latency_ms=_elapsed_ms(started),
                    )
                )
            params = outcome.data if outcome.data is not None else parsed.parameters

            # 4./5. mutation detection + audit
            op = self.operations.get_operation(operation_id)
            if op is not None and op.is_mutation:
                await self.audit.record(operation_id, op.method, params, trace_id=trace_id)

            # 6. timed dispatch
            payload = await self._dispatch_with_timeout(operation_id, params)

        except Exception as exc:  # noqa: BLE001
            return Failure(
                self.classifier.classify(
                    exc,
                    operation_id=operation_id,
                    trace_id=trace_id,
                    latency_ms=_elapsed_ms(started),
                )
            )

        emit(
            log, logging.INFO, "invocation.success", "Operation completed successfully",
            trace_id=trace_id,
            operation_id=operation_id,
            method=op.method if op is not None else None,
            path=op.path if op is not None else None,
            outcome="success",
            latency_ms=_elapsed_ms(started),
        )
        return Success(payload)

    # ---------------------------------------------------------------- dispatch
    async def _call_executor(self, operation_id: str, params: Dict[str, Any]) -> Any:
        execute = self.executor.execute
        if inspect.iscoroutinefunction(execute):
            return await execute(operation_id, params)
        # blocking executors run off-loop so the timer can still fire
        if self._pool is None:
            self._pool = ThreadPoolExecutor(thread_name_prefix="opgate-dispatch")
        call = functools.partial(contextvars.copy_context().run, execute, operation_id, params)
        loop = asyncio.get_running_loop()
        return await resolve(await loop.run_in_executor(self._pool, call))

    async def _dispatch_with_timeout(self, operation_id: str, params: Dict[str, Any]) -> Any:
        timeout_ms = self.settings.timeout_ms
        task = asyncio.ensure_future(self._call_executor(operation_id, params))

        done, _pending = await asyncio.wait({task}, timeout=timeout_ms / 1000)
        if task in done:
            return task.result()

        if self.settings.cancel_on_timeout:
            task.cancel()
        else:
            self._background.add(task)
            task.add_done_callback(self._late_result_handler(operation_id))
        raise OperationTimeoutError(f"Operation timeout after {timeout_ms}ms", operation_id)

    def _late_result_handler(self, operation_id: str):
        trace_id = current_trace_id()

        def _discard(task: asyncio.Task) -> None:
            self._background.discard(task)
            if task.cancelled():
                late = "cancelled"
            elif task.exception() is not None:
                late = type(task.exception()).__name__
            else:
                late = "success"
            emit(
                log, logging.DEBUG, "invocation.late_result_discarded",
                "Abandoned dispatch settled after timeout",
                trace_id=trace_id, operation_id=operation_id, late_outcome=late,
            )

        return _discard
