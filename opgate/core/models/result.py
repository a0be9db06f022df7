"""
InvocationResult
================

Success | Failure, built once per `invoke` and never mutated. `to_response`
projects either variant onto the single wire shape callers receive.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Union

from .failure import FailureClassification


def _text_content(payload: Any) -> list[dict[str, str]]:
    return [{"type": "text", "text": json.dumps(payload, indent=2, default=str)}]


@dataclass(frozen=True, slots=True)
class Success:
    payload: Any

    is_error = False

    def to_response(self) -> Dict[str, Any]:
        return {"content": _text_content(self.payload)}


@dataclass(frozen=True, slots=True)
class Failure:
    classification: FailureClassification

    is_error = True

    @property
    def kind(self):
        return self.classification.kind

    def to_response(self) -> Dict[str, Any]:
        return {
            "isError": True,
            "content": _text_content(self.classification.to_envelope()),
        }


InvocationResult = Union[Success, Failure]
