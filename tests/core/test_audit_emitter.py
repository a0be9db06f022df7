import asyncio

from conftest import OPERATIONS, FakeIdentity, events
from opgate.core.models import Identity
from opgate.core.services.audit_emitter import AuditTrailEmitter
from opgate.core.services.operations_repository import InMemoryOperationsRepository


def emitter(identity=None, **kw):
    return AuditTrailEmitter(
        identity,
        InMemoryOperationsRepository(OPERATIONS),
        remote_base_url="https://bitbucket.example.com",
        **kw,
    )


def record(em, op="create_issue", method="POST", params=None):
    return asyncio.run(em.record(op, method, params or {}, trace_id="trace-9"))


def test_record_fields(caplog):
    em = emitter(FakeIdentity({"accountId": "acc-1", "email": "a@example.com", "authMethod": "oauth2"}))
    rec = record(em, params={"fields": {"summary": "x"}, "api_key": "k"})

    assert rec.user_id == "acc-1"
    assert rec.token_type == "oauth2"
    assert rec.path == "/rest/api/latest/issue"
    assert rec.remote_base_url == "https://bitbucket.example.com"
    assert rec.trace_id == "trace-9"
    assert rec.sanitized_parameters == {"fields": {"summary": "x"}, "api_key": "***"}
    assert rec.timestamp_iso.endswith("Z")

    (evt,) = events(caplog, "invocation.audit")
    assert evt.fields == rec.to_fields()
    assert evt.fields["audit_type"] == "mutation"


def test_unknown_operation_path_defaults():
    rec = record(emitter(FakeIdentity()), op="mystery_op")
    assert rec.path == "unknown"


def test_identity_lookup_chain():
    assert Identity.from_credentials({"email": "e@x", "displayName": "Eve"}).user_id == "e@x"
    assert Identity.from_credentials({"displayName": "Eve"}).user_id == "Eve"
    assert Identity.from_credentials({"username": "bob"}).user_id == "bob"
    assert Identity.from_credentials({"accountId": ""}).user_id == "unknown"
    assert Identity.from_credentials({}).token_type == "unknown"
    assert Identity.from_credentials(None) == Identity.anonymous()


def test_identity_from_object_attributes():
    class Creds:
        username = "carol"
        auth_method = "basic"

    who = Identity.from_credentials(Creds())
    assert (who.user_id, who.token_type) == ("carol", "basic")


def test_sync_identity_provider_supported():
    class SyncIdentity:
        def get_current_credentials(self):
            return {"username": "dave", "auth_method": "pat"}

    assert record(emitter(SyncIdentity())).user_id == "dave"


def test_identity_error_falls_back(caplog):
    rec = record(emitter(FakeIdentity(error=PermissionError("locked"))))
    assert (rec.user_id, rec.token_type) == ("unknown", "unknown")
    assert len(events(caplog, "audit.identity_fallback")) == 1


def test_no_identity_provider_is_anonymous():
    assert record(emitter(None)).user_id == "unknown"


def test_failure_is_swallowed_and_logged(caplog):
    class ExplodingRepo:
        def get_operation(self, operation_id):
            raise RuntimeError("db gone")

    em = AuditTrailEmitter(FakeIdentity(), ExplodingRepo(), remote_base_url="http://x")
    assert asyncio.run(em.record("create_issue", "POST", {}, trace_id="t")) is None

    (failed,) = events(caplog, "audit.failed")
    assert failed.levelname == "ERROR"
    assert failed.fields["error"] == "db gone"
    assert events(caplog, "invocation.audit") == []
