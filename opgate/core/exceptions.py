"""
opgate.core.exceptions
======================

Errors raised inside the gateway or by a Remote Call Executor.

Remote errors carry an explicit `kind`: the failure classifier dispatches
on that tag rather than on the class hierarchy, so a new subclass only has
to declare which FailureKind it belongs to.
"""

from __future__ import annotations

from typing import Any, ClassVar

from opgate.core.models.enums import FailureKind


class OpgateError(Exception):
    """Base class for every error defined by opgate."""


# ════════════════════════════════════════════════════════════════════════
#                         REMOTE CALL ERRORS
# ════════════════════════════════════════════════════════════════════════
class RemoteCallError(OpgateError):
    """An error surfaced by the remote API (or the client talking to it)."""

    kind: ClassVar[FailureKind] = FailureKind.GENERIC_REMOTE

    def __init__(
        self,
        message: str,
        status_code: int,
        operation_id: str,
        response: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.operation_id = operation_id
        self.response = response


class RemoteValidationError(RemoteCallError):
    kind = FailureKind.VALIDATION

    def __init__(self, message: str, operation_id: str, response: Any = None) -> None:
        super().__init__(message, 400, operation_id, response)


class AuthError(RemoteCallError):
    kind = FailureKind.AUTH

    def __init__(
        self, message: str, status_code: int, operation_id: str, response: Any = None
    ) -> None:
        if status_code not in (401, 403):
            raise ValueError(f"AuthError status must be 401 or 403, got {status_code}")
        super().__init__(message, status_code, operation_id, response)


class NotFoundError(RemoteCallError):
    kind = FailureKind.NOT_FOUND

    def __init__(self, message: str, operation_id: str, response: Any = None) -> None:
        super().__init__(message, 404, operation_id, response)


class RateLimitError(RemoteCallError):
    kind = FailureKind.RATE_LIMIT

    def __init__(
        self,
        message: str,
        operation_id: str,
        response: Any = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message, 429, operation_id, response)
        self.retry_after = retry_after


class ServerError(RemoteCallError):
    kind = FailureKind.SERVER


class OperationTimeoutError(RemoteCallError):
    kind = FailureKind.TIMEOUT

    def __init__(self, message: str, operation_id: str) -> None:
        super().__init__(message, 0, operation_id)


# ════════════════════════════════════════════════════════════════════════
#                         GATEWAY-INTERNAL ERRORS
# ════════════════════════════════════════════════════════════════════════
class ComponentUnavailableError(OpgateError):
    """A critical dependency is unhealthy; the invocation never started."""

    status_code = 503

    def __init__(self, component: str, message: str, remediation: str | None = None) -> None:
        super().__init__(message)
        self.component = component
        self.message = message
        self.remediation = remediation


class InputValidationError(OpgateError):
    """The request itself (operation id / parameter shape) is malformed."""


class OperationsLoadError(OpgateError):
    pass


class SettingsError(OpgateError):
    pass
