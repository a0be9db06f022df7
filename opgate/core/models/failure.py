from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .enums import FailureKind


@dataclass(frozen=True, slots=True)
class FailureClassification:
    kind:                FailureKind
    message:             str
    operation_id:        str | None
    status_code:         int | None       # 0 == not an HTTP status, None == absent
    retryable:           bool
    error_name:          str              # wire name; UNKNOWN uses the exception type
    raw_response:        Any        = None
    retry_after_seconds: int | None = None
    details:             Any        = None

    def to_envelope(self) -> Dict[str, Any]:
        """
        The JSON body handed back to callers. `retryable` is not part of it;
        callers derive retryability from `error`.
        """
        envelope: Dict[str, Any] = {"error": self.error_name, "message": self.message}
        if self.status_code:
            envelope["statusCode"] = self.status_code
        if self.details is not None:
            envelope["details"] = self.details
        return envelope

    def __str__(self):
        return f"{self.error_name}({self.status_code}): {self.message}"
