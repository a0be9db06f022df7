"""
HealthGate
==========

Consults a read-only health registry before an invocation is allowed to
touch the validator or the remote executor.

• Any unhealthy *critical* component  →  ComponentUnavailableError.
• Gated components fine but aggregate not HEALTHY  →  info log, proceed.

Layer:  core.services
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from opgate.core.exceptions import ComponentUnavailableError
from opgate.core.interfaces import HealthRegistry
from opgate.core.models import HealthStatus
from opgate.core.utils.logging import emit

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CriticalComponent:
    name:        str
    message:     str
    remediation: str


REMOTE_EXECUTOR   = "RemoteExecutor"
IDENTITY_PROVIDER = "IdentityProvider"

DEFAULT_CRITICAL_COMPONENTS = (
    CriticalComponent(
        REMOTE_EXECUTOR,
        "Remote API unavailable",
        "Check the remote base URL and network connectivity",
    ),
    CriticalComponent(
        IDENTITY_PROVIDER,
        "Authentication unavailable",
        "Re-run credential setup for the configured auth method",
    ),
)


@dataclass(frozen=True)
class GateDecision:
    blocked_by:          Optional[CriticalComponent] = None
    degraded_components: List[str] = field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return self.blocked_by is None


class HealthGate:

    def __init__(
        self,
        registry: HealthRegistry | None,
        critical: Sequence[CriticalComponent] = DEFAULT_CRITICAL_COMPONENTS,
    ) -> None:
        self.registry = registry
        self.critical = tuple(critical)

    def check(self) -> GateDecision:
        if self.registry is None:
            return GateDecision()

        for comp in self.critical:
            if not self.registry.is_healthy(comp.name):
                return GateDecision(blocked_by=comp)

        snapshot = self.registry.snapshot()
        if snapshot.overall is not HealthStatus.HEALTHY:
            return GateDecision(degraded_components=snapshot.unhealthy_names())
        return GateDecision()

    def ensure_available(self, *, trace_id: str, operation_id: str | None = None) -> GateDecision:
        decision = self.check()
        if decision.blocked_by is not None:
            comp = decision.blocked_by
            raise ComponentUnavailableError(comp.name, comp.message, comp.remediation)

        if decision.degraded_components:
            emit(
                log, logging.INFO, "invocation.degraded_mode",
                "Invocation proceeding in degraded mode",
                trace_id=trace_id,
                operation_id=operation_id or "pending",
                degraded_components=decision.degraded_components,
            )
        return decision
