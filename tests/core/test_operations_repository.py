import json

import pytest

from conftest import events
from opgate.core.exceptions import OperationsLoadError
from opgate.core.models import OperationMetadata
from opgate.core.services.operations_repository import (
    InMemoryOperationsRepository,
    YamlOperationsRepository,
)

YAML_OPS = """\
operations:
  - operationId: get_issue
    method: get
    path: /rest/api/latest/issue/{issueIdOrKey}
  - operation_id: create_issue
    method: POST
    path: /rest/api/latest/issue
    summary: Create an issue
    deprecated: true
"""


def test_yaml_repository(tmp_path, caplog):
    path = tmp_path / "ops.yaml"
    path.write_text(YAML_OPS)
    repo = YamlOperationsRepository(path)

    get = repo.get_operation("get_issue")
    assert get.method == "GET"
    assert not get.is_mutation

    create = repo.get_operation("create_issue")
    assert create.is_mutation
    assert create.deprecated is True
    assert create.summary == "Create an issue"

    assert repo.get_operation("missing") is None
    assert repo.count() == 2
    assert len(events(caplog, "operations_repository.loaded")) == 1   # loaded lazily, once


def test_generated_json_file_loads(tmp_path):
    path = tmp_path / "operations.json"
    path.write_text(json.dumps({
        "_metadata": {"total_operations": 1},
        "operations": [{"operationId": "delete_repo", "method": "DELETE", "path": "/repos/{slug}"}],
    }))
    assert YamlOperationsRepository(path).get_operation("delete_repo").is_mutation


@pytest.mark.parametrize(
    "body",
    ["operations: {}\n", "operations:\n  - method: GET\n    path: /x\n", "operations:\n  - 42\n"],
)
def test_bad_files_raise(tmp_path, caplog, body):
    path = tmp_path / "ops.yaml"
    path.write_text(body)
    with pytest.raises(OperationsLoadError):
        YamlOperationsRepository(path).get_operation("x")
    assert len(events(caplog, "operations_repository.load_error")) == 1


def test_missing_file_raises(tmp_path):
    with pytest.raises(OperationsLoadError, match="Failed to load operations"):
        YamlOperationsRepository(tmp_path / "nope.yaml").count()


@pytest.mark.parametrize("method", ["post", "PUT", "Patch", "DELETE"])
def test_mutation_methods(method):
    assert OperationMetadata("op", method, "/p").is_mutation


@pytest.mark.parametrize("method", ["GET", "HEAD", "OPTIONS"])
def test_non_mutation_methods(method):
    assert not OperationMetadata("op", method, "/p").is_mutation


def test_in_memory_add():
    repo = InMemoryOperationsRepository()
    repo.add(OperationMetadata("op", "GET", "/p"))
    assert len(repo) == 1 and repo.get_operation("op").path == "/p"
