"""
ComponentRegistry
=================

In-memory health book-keeping for the gateway's dependencies.

Whoever owns the dependencies (startup code, health checks) writes to it;
the gateway only reads `is_healthy()` / `snapshot()`.

Layer:  core.services
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List

from opgate.core.models import ComponentHealth, ComponentType, HealthSnapshot, HealthStatus
from opgate.core.utils.logging import emit

log = logging.getLogger(__name__)


class ComponentRegistry:

    def __init__(self) -> None:
        self._components: Dict[str, ComponentHealth] = {}

    # ---------------------------------------------------------------- writers
    def register(self, name: str, type: ComponentType = ComponentType.OPTIONAL) -> None:
        if name in self._components:
            log.warning("Component %s already registered, skipping", name)
            return
        self._components[name] = ComponentHealth(name=name, type=type)
        log.debug("Component %s registered (%s)", name, type.value)

    def update_health(self, name: str, status: HealthStatus, message: str | None = None) -> None:
        comp = self._components.get(name)
        if comp is None:
            log.warning("Attempted to update health for unregistered component %s", name)
            return

        old = comp.status
        comp.status = status
        comp.message = message
        comp.last_check = datetime.now(timezone.utc)

        if old is not status:
            emit(
                log, logging.INFO, "component.health_changed", "Component health changed",
                component=name, type=comp.type.value,
                from_status=old.value, to_status=status.value, detail=message,
            )

    def clear(self) -> None:
        self._components.clear()

    # ---------------------------------------------------------------- readers
    def component_health(self, name: str) -> ComponentHealth | None:
        return self._components.get(name)

    def is_healthy(self, name: str) -> bool:
        comp = self._components.get(name)
        return comp is not None and comp.status is HealthStatus.HEALTHY

    def names(self) -> List[str]:
        return list(self._components)

    def snapshot(self) -> HealthSnapshot:
        comps = tuple(
            ComponentHealth(c.name, c.type, c.status, c.message, c.last_check)
            for c in self._components.values()
        )
        if any(c.type is ComponentType.CRITICAL and c.status is HealthStatus.UNHEALTHY for c in comps):
            overall = HealthStatus.UNHEALTHY
        elif any(c.status is not HealthStatus.HEALTHY for c in comps):
            overall = HealthStatus.DEGRADED
        else:
            overall = HealthStatus.HEALTHY
        return HealthSnapshot(overall=overall, components=comps)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<ComponentRegistry {len(self._components)} components>"
