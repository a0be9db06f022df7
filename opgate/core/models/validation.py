from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    success: bool
    data:    Dict[str, Any] | None = None
    errors:  List[Any]            = field(default_factory=list)

    @classmethod
    def ok(cls, data: Dict[str, Any]) -> "ValidationOutcome":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, errors: List[Any]) -> "ValidationOutcome":
        return cls(success=False, errors=list(errors))
