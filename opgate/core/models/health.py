from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Tuple

from .enums import ComponentType, HealthStatus


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ComponentHealth:
    name:       str
    type:       ComponentType
    status:     HealthStatus  = HealthStatus.UNHEALTHY   # unhealthy until proven otherwise
    message:    str | None    = None
    last_check: datetime      = field(default_factory=_now)


@dataclass(frozen=True, slots=True)
class HealthSnapshot:
    overall:    HealthStatus
    components: Tuple[ComponentHealth, ...] = ()
    timestamp:  datetime = field(default_factory=_now)

    def unhealthy_names(self) -> List[str]:
        return [c.name for c in self.components if c.status is not HealthStatus.HEALTHY]
