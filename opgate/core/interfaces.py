"""
Capabilities the gateway consumes but does not implement.

Validator, executor and identity provider may be plain functions/methods or
coroutines: the gateway awaits whatever comes back (see utils.aio).
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Protocol, Union, runtime_checkable

from opgate.core.models import HealthSnapshot, OperationMetadata, ValidationOutcome

MaybeAwaitable = Union[Any, Awaitable[Any]]


@runtime_checkable
class ParameterValidator(Protocol):
    def validate(
        self, operation_id: str, parameters: Dict[str, Any]
    ) -> ValidationOutcome | Awaitable[ValidationOutcome]:
        ...


@runtime_checkable
class OperationRepository(Protocol):
    def get_operation(self, operation_id: str) -> OperationMetadata | None:
        ...


@runtime_checkable
class RemoteCallExecutor(Protocol):
    def execute(self, operation_id: str, parameters: Dict[str, Any]) -> MaybeAwaitable:
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    def get_current_credentials(self) -> MaybeAwaitable:
        ...


@runtime_checkable
class HealthRegistry(Protocol):
    def is_healthy(self, name: str) -> bool:
        ...

    def snapshot(self) -> HealthSnapshot:
        ...


Sanitizer = Callable[[Any], Any]
