"""
Global test fixtures.

• Recording fakes for every capability the gateway consumes, so tests can
  assert who was (and was not) called.
• `make_gateway` wires them into an OperationGateway with a short timeout.
"""
import asyncio
import json
import logging

import pytest

from opgate.core.config.settings import Settings
from opgate.core.models import ComponentType, HealthStatus, OperationMetadata, ValidationOutcome
from opgate.core.services.component_registry import ComponentRegistry
from opgate.core.services.gateway import OperationGateway
from opgate.core.services.operations_repository import InMemoryOperationsRepository


# ───────────────────────────────────────────────────────── fakes
class RecordingValidator:
    def __init__(self, errors=None):
        self.calls = []
        self.errors = errors

    def validate(self, operation_id, parameters):
        self.calls.append((operation_id, parameters))
        if self.errors:
            return ValidationOutcome.failed(self.errors)
        return ValidationOutcome.ok(dict(parameters))


class RecordingExecutor:
    """Async executor: returns `result`, raises `error`, optionally sleeps first."""

    def __init__(self, result=None, error=None, delay=0.0, on_call=None):
        self.calls = []
        self.result = result
        self.error = error
        self.delay = delay
        self.on_call = on_call
        self.finished = False

    async def execute(self, operation_id, parameters):
        self.calls.append((operation_id, parameters))
        if self.on_call:
            self.on_call()
        if self.delay:
            await asyncio.sleep(self.delay)
        self.finished = True
        if self.error is not None:
            raise self.error
        return self.result


class FakeIdentity:
    def __init__(self, credentials=None, error=None):
        self.credentials = credentials or {"username": "alice", "auth_method": "pat"}
        self.error = error

    async def get_current_credentials(self):
        if self.error is not None:
            raise self.error
        return self.credentials


OPERATIONS = [
    OperationMetadata("get_issue", "GET", "/rest/api/latest/issue/{issueIdOrKey}"),
    OperationMetadata("create_issue", "POST", "/rest/api/latest/issue", summary="Create issue"),
    OperationMetadata("update_issue", "PUT", "/rest/api/latest/issue/{issueIdOrKey}"),
    OperationMetadata("patch_issue", "PATCH", "/rest/api/latest/issue/{issueIdOrKey}"),
    OperationMetadata("delete_issue", "DELETE", "/rest/api/latest/issue/{issueIdOrKey}"),
]


def healthy_registry():
    reg = ComponentRegistry()
    for name in ("RemoteExecutor", "IdentityProvider"):
        reg.register(name, ComponentType.CRITICAL)
        reg.update_health(name, HealthStatus.HEALTHY)
    return reg


def envelope(response):
    """Decode the JSON text of a normalized response."""
    return json.loads(response["content"][0]["text"])


def events(caplog, name):
    return [r for r in caplog.records if getattr(r, "event", None) == name]


def outcome_events(caplog):
    return [r for r in caplog.records if "outcome" in (getattr(r, "fields", None) or {})]


# ───────────────────────────────────────────────────────── fixtures
@pytest.fixture
def validator():
    return RecordingValidator()


@pytest.fixture
def executor():
    return RecordingExecutor(result={"status": 200, "data": {"id": 1}})


@pytest.fixture
def operations():
    return InMemoryOperationsRepository(OPERATIONS)


@pytest.fixture
def registry():
    return healthy_registry()


@pytest.fixture
def make_gateway(validator, operations, executor, registry):
    def _make(**overrides):
        settings = overrides.pop("settings", Settings(timeout_ms=1000))
        return OperationGateway(
            overrides.pop("validator", validator),
            overrides.pop("operations", operations),
            overrides.pop("executor", executor),
            overrides.pop("identity", FakeIdentity()),
            settings=settings,
            registry=overrides.pop("registry", registry),
            **overrides,
        )

    return _make


@pytest.fixture(autouse=True)
def _capture_everything(caplog):
    caplog.set_level(logging.DEBUG)
    yield
