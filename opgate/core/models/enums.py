from enum import Enum


class FailureKind(Enum):
    """Closed failure taxonomy, ordered from most to least specific."""

    VALIDATION            = "ValidationError"
    AUTH                  = "AuthError"
    NOT_FOUND             = "NotFoundError"
    RATE_LIMIT            = "RateLimitError"
    TIMEOUT               = "TimeoutError"
    SERVER                = "ServerError"
    GENERIC_REMOTE        = "RemoteCallError"
    COMPONENT_UNAVAILABLE = "ComponentUnavailableError"
    UNKNOWN               = "UnknownError"

    @property
    def wire_name(self) -> str:
        return self.value


class HealthStatus(Enum):
    HEALTHY   = "HEALTHY"
    DEGRADED  = "DEGRADED"
    UNHEALTHY = "UNHEALTHY"


class ComponentType(Enum):
    CRITICAL = "CRITICAL"
    OPTIONAL = "OPTIONAL"


MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
