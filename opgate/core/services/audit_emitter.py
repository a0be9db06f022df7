"""
AuditTrailEmitter
=================

Builds and logs one AuditRecord per mutating invocation, right before the
remote call is dispatched.

Best-effort by contract: `record()` has its own error boundary, so neither
an identity lookup failure nor a broken sanitizer can change the outcome of
the invocation that triggered it.

Layer:  core.services
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from opgate.core.interfaces import IdentityProvider, OperationRepository, Sanitizer
from opgate.core.models import AuditRecord, Identity
from opgate.core.utils.aio import resolve
from opgate.core.utils.logging import emit
from opgate.core.utils.sanitizer import redact_params

log = logging.getLogger(__name__)

UNKNOWN_PATH = "unknown"


def _utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class AuditTrailEmitter:

    def __init__(
        self,
        identity: IdentityProvider | None,
        operations: OperationRepository,
        *,
        remote_base_url: str,
        sanitizer: Sanitizer = redact_params,
    ) -> None:
        self.identity = identity
        self.operations = operations
        self.remote_base_url = remote_base_url
        self.sanitizer = sanitizer

    # ---------------------------------------------------------------- public
    async def record(
        self,
        operation_id: str,
        method: str,
        parameters: Any,
        *,
        trace_id: str,
    ) -> Optional[AuditRecord]:
        """Emit the audit event; returns the record, or None if emission failed."""
        try:
            who = await self._resolve_identity()
            op = self.operations.get_operation(operation_id)

            rec = AuditRecord(
                trace_id=trace_id,
                operation_id=operation_id,
                remote_base_url=self.remote_base_url,
                method=method,
                path=op.path if op is not None else UNKNOWN_PATH,
                sanitized_parameters=self.sanitizer(parameters),
                user_id=who.user_id,
                token_type=who.token_type,
                timestamp_iso=_utc_iso(),
            )
            emit(log, logging.INFO, "invocation.audit", "Mutation audit trail", **rec.to_fields())
            return rec

        except Exception as exc:  # noqa: BLE001
            emit(
                log, logging.ERROR, "audit.failed", "Failed to log audit trail",
                trace_id=trace_id, operation_id=operation_id, error=str(exc),
            )
            return None

    # ---------------------------------------------------------------- internals
    async def _resolve_identity(self) -> Identity:
        if self.identity is None:
            return Identity.anonymous()
        try:
            creds = await resolve(self.identity.get_current_credentials())
        except Exception as exc:  # noqa: BLE001
            emit(
                log, logging.DEBUG, "audit.identity_fallback",
                "Failed to get identity, using anonymous", error=str(exc),
            )
            return Identity.anonymous()
        return Identity.from_credentials(creds)
