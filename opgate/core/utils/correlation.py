"""
Request-scoped correlation context.

Backed by a ContextVar so every asyncio task spawned inside a scope (the
dispatch task included) sees the same trace id without a module global.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator, Optional

NO_CORRELATION_ID = "no-correlation-id"


@dataclass(frozen=True)
class CorrelationContext:
    correlation_id: str
    service:        str = "opgate"
    version:        str = "0.1.0"


_current: ContextVar[Optional[CorrelationContext]] = ContextVar(
    "opgate_correlation", default=None
)


def new_correlation_id() -> str:
    return str(uuid.uuid4())


def current_context() -> Optional[CorrelationContext]:
    return _current.get()


def current_trace_id() -> str:
    ctx = _current.get()
    return ctx.correlation_id if ctx else NO_CORRELATION_ID


@contextmanager
def correlation_scope(
    correlation_id: Optional[str] = None, **kwargs
) -> Iterator[CorrelationContext]:
    ctx = CorrelationContext(correlation_id=correlation_id or new_correlation_id(), **kwargs)
    token = _current.set(ctx)
    try:
        yield ctx
    finally:
        _current.reset(token)
