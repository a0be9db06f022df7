"""
FailureClassifier
=================

Maps any error raised while serving an invocation onto a
FailureClassification: kind, status code, retryability, user-facing message.

Layer:  core.services

Kind resolution
---------------
1. RemoteCallError subclasses declare their kind (`error.kind`).
2. Anything else exposing an integer `status_code` / `statusCode` is
   classified by shape (400, 401/403, 404, 429, 5xx, other).
3. ComponentUnavailableError / InputValidationError / builtin TimeoutError
   map onto their obvious kinds.
4. Everything else is UNKNOWN.

Each kind has exactly one rule in `_RULES`; a kind without a rule is an
import-time error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

from opgate.core.exceptions import (
    ComponentUnavailableError,
    InputValidationError,
    RemoteCallError,
)
from opgate.core.models import FailureClassification, FailureKind
from opgate.core.utils.logging import emit

log = logging.getLogger(__name__)

RETRYABLE_GENERIC_CODES = frozenset({0, 408, 425, 429})


# ────────────────────────────────────────────────────────── error view
@dataclass(frozen=True)
class _ErrorView:
    """Uniform read-only projection of whatever was raised."""

    kind:         FailureKind
    message:      str
    status_code:  int | None
    operation_id: str | None
    response:     Any        = None
    retry_after:  int | None = None
    type_name:    str        = FailureKind.UNKNOWN.wire_name
    details:      Any        = None


def _first_attr(obj: Any, *names: str) -> Any:
    for name in names:
        value = getattr(obj, name, None)
        if value is not None:
            return value
    return None


def kind_for_status(code: int) -> FailureKind:
    if code == 400:
        return FailureKind.VALIDATION
    if code in (401, 403):
        return FailureKind.AUTH
    if code == 404:
        return FailureKind.NOT_FOUND
    if code == 429:
        return FailureKind.RATE_LIMIT
    if 500 <= code <= 599:
        return FailureKind.SERVER
    return FailureKind.GENERIC_REMOTE


def kind_of(error: Any) -> FailureKind:
    if isinstance(error, RemoteCallError):
        return error.kind
    if isinstance(error, ComponentUnavailableError):
        return FailureKind.COMPONENT_UNAVAILABLE
    if isinstance(error, InputValidationError):
        return FailureKind.VALIDATION
    if isinstance(error, TimeoutError):
        return FailureKind.TIMEOUT
    code = _first_attr(error, "status_code", "statusCode")
    if isinstance(code, int) and not isinstance(code, bool):
        return kind_for_status(code)
    return FailureKind.UNKNOWN


def _view(error: Any, operation_id: str | None) -> _ErrorView:
    kind = kind_of(error)
    message = _first_attr(error, "message")
    if not isinstance(message, str):
        message = str(error)
    code = _first_attr(error, "status_code", "statusCode")
    return _ErrorView(
        kind=kind,
        message=message,
        status_code=code if isinstance(code, int) else None,
        operation_id=_first_attr(error, "operation_id", "operationId") or operation_id,
        response=_first_attr(error, "response"),
        retry_after=_first_attr(error, "retry_after", "retry_after_seconds", "retryAfterSeconds"),
        type_name=type(error).__name__ if isinstance(error, BaseException) else FailureKind.UNKNOWN.wire_name,
    )


# ────────────────────────────────────────────────────────── rules
# rule(view, remote_name) -> (message, status_code, retryable)
Rule = Callable[[_ErrorView, str], Tuple[str, "int | None", bool]]


def _rate_limit(v: _ErrorView, _remote: str):
    if v.retry_after:
        return f"Rate limit exceeded. Retry after {v.retry_after}s", 429, True
    return "Rate limit exceeded", 429, True


def _generic(v: _ErrorView, _remote: str):
    code = v.status_code or 0
    return v.message, code, code in RETRYABLE_GENERIC_CODES or code >= 500


_RULES: Dict[FailureKind, Rule] = {
    FailureKind.VALIDATION:            lambda v, _: (f"Invalid parameters: {v.message}", 400, False),
    FailureKind.AUTH:                  lambda v, _: (f"Authentication failed: {v.message}", v.status_code or 401, False),
    FailureKind.NOT_FOUND:             lambda v, _: (f"Resource not found: {v.message}", 404, False),
    FailureKind.RATE_LIMIT:            _rate_limit,
    FailureKind.TIMEOUT:               lambda v, _: (v.message, 0, True),
    FailureKind.SERVER:                lambda v, r: (f"{r} server error: {v.status_code} {v.message}", v.status_code, True),
    FailureKind.GENERIC_REMOTE:        _generic,
    FailureKind.COMPONENT_UNAVAILABLE: lambda v, _: (v.message, 503, False),
    FailureKind.UNKNOWN:               lambda v, _: (f"Operation failed: {v.message}", None, False),
}

_missing = set(FailureKind) - set(_RULES)
if _missing:
    raise RuntimeError(f"FailureClassifier has no rule for {sorted(k.name for k in _missing)}")

_LOG_MESSAGES = {
    FailureKind.VALIDATION:            "Operation failed: validation error",
    FailureKind.AUTH:                  "Operation failed: authentication error",
    FailureKind.NOT_FOUND:             "Operation failed: resource not found",
    FailureKind.RATE_LIMIT:            "Operation failed: rate limit exceeded",
    FailureKind.TIMEOUT:               "Operation failed: timeout",
    FailureKind.SERVER:                "Operation failed: server error",
    FailureKind.GENERIC_REMOTE:        "Operation failed: client error",
    FailureKind.COMPONENT_UNAVAILABLE: "Operation rejected: component unavailable",
    FailureKind.UNKNOWN:               "Operation failed: unexpected error",
}


# ────────────────────────────────────────────────────────── classifier
class FailureClassifier:
    """
    Stateless apart from `remote_name`, which only feeds the server-error
    message ("<remote_name> server error: 503 ...").
    """

    def __init__(self, remote_name: str = "Bitbucket") -> None:
        self.remote_name = remote_name

    # ---------------------------------------------------------------- public
    def classify(
        self,
        error: Any,
        *,
        operation_id: str | None,
        trace_id: str,
        latency_ms: int,
    ) -> FailureClassification:
        if isinstance(error, ComponentUnavailableError):
            return self.classify_unavailable(
                error, operation_id=operation_id, trace_id=trace_id, latency_ms=latency_ms
            )
        view = _view(error, operation_id)
        return self._build(view, trace_id=trace_id, latency_ms=latency_ms)

    def classify_validation(
        self,
        errors: List[Any],
        *,
        operation_id: str,
        trace_id: str,
        latency_ms: int,
    ) -> FailureClassification:
        """Validator rejection: the error list is embedded verbatim as details."""
        view = _ErrorView(
            kind=FailureKind.VALIDATION,
            message="operation parameters failed validation",
            status_code=400,
            operation_id=operation_id,
            details=list(errors),
        )
        return self._build(view, trace_id=trace_id, latency_ms=latency_ms)

    def classify_unavailable(
        self,
        error: ComponentUnavailableError,
        *,
        operation_id: str | None,
        trace_id: str,
        latency_ms: int,
    ) -> FailureClassification:
        """Health-gate rejection: names the component and its remediation."""
        view = _ErrorView(
            kind=FailureKind.COMPONENT_UNAVAILABLE,
            message=error.message,
            status_code=error.status_code,
            operation_id=operation_id,
            type_name=type(error).__name__,
            details={"component": error.component, "remediation": error.remediation},
        )
        return self._build(view, trace_id=trace_id, latency_ms=latency_ms)

    # ---------------------------------------------------------------- internals
    def _build(self, view: _ErrorView, *, trace_id: str, latency_ms: int) -> FailureClassification:
        message, status_code, retryable = _RULES[view.kind](view, self.remote_name)
        error_name = view.type_name if view.kind is FailureKind.UNKNOWN else view.kind.wire_name

        details = view.details
        if details is None and view.kind is FailureKind.VALIDATION:
            details = view.response

        classification = FailureClassification(
            kind=view.kind,
            message=message,
            operation_id=view.operation_id,
            status_code=status_code,
            retryable=retryable,
            error_name=error_name,
            raw_response=view.response,
            retry_after_seconds=view.retry_after if view.kind is FailureKind.RATE_LIMIT else None,
            details=details,
        )
        self._log(classification, view, trace_id=trace_id, latency_ms=latency_ms)
        return classification

    def _log(self, c: FailureClassification, view: _ErrorView, *, trace_id: str, latency_ms: int) -> None:
        fields: Dict[str, Any] = {
            "trace_id":     trace_id,
            "operation_id": c.operation_id,
            "latency_ms":   latency_ms,
            "outcome":      c.error_name,
            "error_type":   c.kind.name,
            "retryable":    c.retryable,
            "error":        view.message,
        }
        if c.status_code is not None:
            fields["status_code"] = c.status_code
        if c.kind is FailureKind.RATE_LIMIT:
            fields["retry_after"] = c.retry_after_seconds
        emit(log, logging.ERROR, "invocation.failure", _LOG_MESSAGES[c.kind], **fields)
