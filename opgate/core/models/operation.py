from __future__ import annotations

from dataclasses import dataclass

from .enums import MUTATING_METHODS


@dataclass(frozen=True, slots=True)
class OperationMetadata:
    operation_id: str
    method:       str
    path:         str
    summary:      str  = ""
    deprecated:   bool = False

    @property
    def is_mutation(self) -> bool:
        return self.method.upper() in MUTATING_METHODS

    def __str__(self):
        return f"{self.method.upper()} {self.path} ({self.operation_id})"
