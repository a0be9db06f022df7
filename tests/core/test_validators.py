import asyncio

from conftest import envelope
from opgate.core.services.validators import PassthroughValidator, RequiredFieldsValidator


def test_passthrough_copies_parameters():
    params = {"a": 1}
    outcome = PassthroughValidator().validate("op", params)
    assert outcome.success and outcome.data == params
    assert outcome.data is not params


def test_required_fields_reports_each_missing_key():
    v = RequiredFieldsValidator({"create_issue": ["project", "summary"]})
    outcome = v.validate("create_issue", {"project": "P"})
    assert not outcome.success
    assert outcome.errors == [{"path": ["summary"], "message": "Required field 'summary' is missing"}]


def test_required_fields_ignores_unlisted_operations():
    assert RequiredFieldsValidator({}).validate("anything", {}).success


def test_required_fields_through_gateway(make_gateway, executor):
    gw = make_gateway(validator=RequiredFieldsValidator({"create_issue": ["summary"]}))
    resp = asyncio.run(gw.invoke_response({"operationId": "create_issue", "parameters": {}}))

    body = envelope(resp)
    assert body["message"] == "Invalid parameters: operation parameters failed validation"
    assert body["details"][0]["path"] == ["summary"]
    assert executor.calls == []
