from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping


@dataclass(frozen=True, slots=True)
class InvocationRequest:
    operation_id: Any                       # validated by the gateway, not here
    parameters:   Mapping[str, Any] | str | None = field(default=None)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "InvocationRequest":
        """Accept both the snake_case and the camelCase key spelling."""
        op_id = raw.get("operation_id", raw.get("operationId"))
        return cls(operation_id=op_id, parameters=raw.get("parameters"))


@dataclass(frozen=True, slots=True)
class ParsedRequest:
    operation_id: str
    parameters:   Dict[str, Any]
