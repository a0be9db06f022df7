from .enums         import FailureKind, HealthStatus, ComponentType, MUTATING_METHODS
from .request       import InvocationRequest, ParsedRequest
from .operation     import OperationMetadata
from .validation    import ValidationOutcome
from .failure       import FailureClassification
from .result        import Success, Failure, InvocationResult
from .audit_record  import AuditRecord, Identity
from .health        import ComponentHealth, HealthSnapshot

__all__ = [
    "FailureKind",
    "HealthStatus",
    "ComponentType",
    "MUTATING_METHODS",
    "InvocationRequest",
    "ParsedRequest",
    "OperationMetadata",
    "ValidationOutcome",
    "FailureClassification",
    "Success",
    "Failure",
    "InvocationResult",
    "AuditRecord",
    "Identity",
    "ComponentHealth",
    "HealthSnapshot",
]
