from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

UNKNOWN = "unknown"


def _attr(*names: str) -> Callable[[Any], Optional[str]]:
    """Extractor reading the first present key/attribute out of `names`."""
    def extract(source: Any) -> Optional[str]:
        for name in names:
            value = (
                source.get(name) if isinstance(source, Mapping)
                else getattr(source, name, None)
            )
            if isinstance(value, str) and value.strip():
                return value
        return None

    return extract


# order matters: account id beats email beats username beats display name
USER_ID_EXTRACTORS: Tuple[Callable[[Any], Optional[str]], ...] = (
    _attr("account_id", "accountId"),
    _attr("email"),
    _attr("username"),
    _attr("display_name", "displayName"),
)

TOKEN_TYPE_EXTRACTORS: Tuple[Callable[[Any], Optional[str]], ...] = (
    _attr("auth_method", "authMethod", "token_type", "tokenType"),
)


def first_of(extractors, source: Any, default: str = UNKNOWN) -> str:
    for extract in extractors:
        value = extract(source)
        if value is not None:
            return value
    return default


@dataclass(frozen=True, slots=True)
class Identity:
    user_id:    str
    token_type: str

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls(user_id=UNKNOWN, token_type=UNKNOWN)

    @classmethod
    def from_credentials(cls, credentials: Any) -> "Identity":
        if credentials is None:
            return cls.anonymous()
        return cls(
            user_id=first_of(USER_ID_EXTRACTORS, credentials),
            token_type=first_of(TOKEN_TYPE_EXTRACTORS, credentials),
        )


@dataclass(frozen=True, slots=True)
class AuditRecord:
    trace_id:             str
    operation_id:         str
    remote_base_url:      str
    method:               str
    path:                 str
    sanitized_parameters: Any
    user_id:              str
    token_type:           str
    timestamp_iso:        str

    audit_type = "mutation"

    def to_fields(self) -> Dict[str, Any]:
        return {
            "audit_type":      self.audit_type,
            "trace_id":        self.trace_id,
            "operation_id":    self.operation_id,
            "remote_base_url": self.remote_base_url,
            "method":          self.method,
            "path":            self.path,
            "parameters":      self.sanitized_parameters,
            "user_id":         self.user_id,
            "token_type":      self.token_type,
            "timestamp":       self.timestamp_iso,
        }
