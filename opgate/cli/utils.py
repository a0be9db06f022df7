from __future__ import annotations
import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console

from opgate.core.config.settings              import Settings, load_settings, resolve_object
from opgate.core.exceptions                   import SettingsError
from opgate.core.services.gateway             import OperationGateway
from opgate.core.services.operations_repository import (
    InMemoryOperationsRepository,
    YamlOperationsRepository,
)
from opgate.core.services.validators          import PassthroughValidator
from opgate.core.utils.logging                import configure

console = Console()
err_console = Console(stderr=True)

_PAIR = re.compile(r"^([^=]+)=(.+)$")


# ----------------------------------------------------------------------
# --param key=value parsing
def parse_param_pairs(pairs: List[str]) -> Dict[str, Any]:
    """
    key=value pairs → dict. Values that parse as JSON keep their JSON type
    (numbers, booleans, objects); anything else stays a string.
    """
    params: Dict[str, Any] = {}
    for pair in pairs:
        m = _PAIR.match(pair)
        if not m:
            raise typer.BadParameter(
                f'Invalid parameter format: "{pair}". Expected format: key=value'
            )
        key, value = m.groups()
        try:
            params[key] = json.loads(value)
        except json.JSONDecodeError:
            params[key] = value
    return params


# ----------------------------------------------------------------------
# settings / wiring
def load_cli_settings(config: Optional[Path]) -> Settings:
    try:
        settings = load_settings(config)
    except SettingsError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=2)
    configure(settings.log_level)
    return settings


def operations_for(settings: Settings):
    if settings.operations_file:
        return YamlOperationsRepository(settings.operations_file)
    return InMemoryOperationsRepository()


def validator_for(settings: Settings):
    if settings.validator:
        return resolve_object(settings.validator)
    return PassthroughValidator()


def build_gateway(settings: Settings) -> OperationGateway:
    if not settings.executor:
        raise SettingsError("No executor configured (set 'executor: module:attribute')")
    return OperationGateway(
        validator_for(settings),
        operations_for(settings),
        resolve_object(settings.executor),
        resolve_object(settings.identity) if settings.identity else None,
        settings=settings,
    )
