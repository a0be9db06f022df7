"""
Operation metadata lookup.

YamlOperationsRepository reads a document of the form

    operations:
      - operationId: create_issue
        method: POST
        path: /rest/api/latest/issue
        summary: Create an issue

(JSON is valid YAML, so generated `operations.json` files load unchanged.)
The file is read lazily on first lookup.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

import yaml

from opgate.core.exceptions import OperationsLoadError
from opgate.core.models import OperationMetadata
from opgate.core.utils.logging import emit

log = logging.getLogger(__name__)


def _to_metadata(raw: Mapping[str, Any]) -> OperationMetadata:
    op_id = raw.get("operationId") or raw.get("operation_id")
    if not op_id or not raw.get("method") or not raw.get("path"):
        raise OperationsLoadError(f"Incomplete operation entry: {dict(raw)!r}")
    return OperationMetadata(
        operation_id=str(op_id),
        method=str(raw["method"]).upper(),
        path=str(raw["path"]),
        summary=str(raw.get("summary") or ""),
        deprecated=bool(raw.get("deprecated", False)),
    )


class InMemoryOperationsRepository:

    def __init__(self, operations: Iterable[OperationMetadata] = ()) -> None:
        self._ops: Dict[str, OperationMetadata] = {op.operation_id: op for op in operations}

    def add(self, operation: OperationMetadata) -> None:
        self._ops[operation.operation_id] = operation

    def get_operation(self, operation_id: str) -> OperationMetadata | None:
        return self._ops.get(operation_id)

    def __len__(self) -> int:
        return len(self._ops)


class YamlOperationsRepository:

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._ops: Dict[str, OperationMetadata] | None = None

    def get_operation(self, operation_id: str) -> OperationMetadata | None:
        return self._load().get(operation_id)

    def count(self) -> int:
        return len(self._load())

    # ---------------------------------------------------------------- helpers
    def _load(self) -> Dict[str, OperationMetadata]:
        if self._ops is not None:
            return self._ops

        try:
            with open(self.path, "r") as fp:
                data = yaml.safe_load(fp) or {}
            entries = data.get("operations", []) if isinstance(data, Mapping) else data
            if not isinstance(entries, list):
                raise OperationsLoadError("'operations' must be a list")
            ops = {}
            for raw in entries:
                op = _to_metadata(raw)
                ops[op.operation_id] = op
        except (OSError, yaml.YAMLError, OperationsLoadError, AttributeError) as exc:
            emit(
                log, logging.ERROR, "operations_repository.load_error",
                "Failed to load operations file",
                file_path=str(self.path), error_message=str(exc),
            )
            raise OperationsLoadError(f"Failed to load operations: {exc}") from exc

        emit(
            log, logging.INFO, "operations_repository.loaded",
            "Operations loaded successfully", total_operations=len(ops),
        )
        self._ops = ops
        return ops

    def __repr__(self) -> str:  # pragma: no cover
        return f"<YamlOperationsRepository {self.path}>"
