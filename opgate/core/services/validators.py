"""
Reference Parameter Validators.

Real per-operation schemas are generated elsewhere; these two cover the CLI
and the test-suite. Error entries are plain dicts ({"path", "message"}) so
they serialize verbatim into the failure envelope.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from opgate.core.models import ValidationOutcome


class PassthroughValidator:
    """Accept any mapping unchanged."""

    def validate(self, operation_id: str, parameters: Dict[str, Any]) -> ValidationOutcome:
        if not isinstance(parameters, Mapping):
            return ValidationOutcome.failed([{"path": [], "message": "Expected an object"}])
        return ValidationOutcome.ok(dict(parameters))


class RequiredFieldsValidator:
    """
    Reject parameter sets missing any of the keys listed for the operation.
    Operations with no entry are accepted as-is.
    """

    def __init__(self, required: Mapping[str, Iterable[str]]) -> None:
        self.required = {op: tuple(keys) for op, keys in required.items()}

    def validate(self, operation_id: str, parameters: Dict[str, Any]) -> ValidationOutcome:
        missing = [k for k in self.required.get(operation_id, ()) if k not in parameters]
        if missing:
            return ValidationOutcome.failed(
                [{"path": [k], "message": f"Required field '{k}' is missing"} for k in missing]
            )
        return ValidationOutcome.ok(dict(parameters))
