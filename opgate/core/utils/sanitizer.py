"""
Parameter redaction used for audit records and structured log fields.

Keys are matched case-insensitively by substring, so `X-Api-Key`,
`client_secret` and `refreshToken` are all masked.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

REDACTED = "***"

SENSITIVE_FIELDS = (
    "password",
    "token",
    "access_token",
    "refresh_token",
    "authorization",
    "credentials",
    "apikey",
    "api_key",
    "secret",
    "client_secret",
    "privatekey",
    "private_key",
    "sessiontoken",
    "session_token",
)


def is_sensitive_field(name: Any) -> bool:
    lowered = str(name).lower()
    return any(s in lowered for s in SENSITIVE_FIELDS)


def _redact(obj: Any) -> Any:
    if isinstance(obj, Mapping):
        return {
            k: REDACTED if is_sensitive_field(k) else _redact(v)
            for k, v in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        return [_redact(item) for item in obj]
    return obj


def redact_params(params: Any) -> Any:
    """Return a deep copy of `params` with secret-shaped fields masked."""
    if params is None:
        return None
    return _redact(copy.deepcopy(params))

