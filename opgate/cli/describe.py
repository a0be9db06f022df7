"""
Read-only command: show what the gateway knows about one
operation id (method, path, whether it will be audited as a mutation).

    $ opgate describe create_issue --config opgate.yaml
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from opgate.core.exceptions import OperationsLoadError

from .utils import console, err_console, load_cli_settings, operations_for


def describe_cmd(
    operation_id: str = typer.Argument(..., help="Operation id to look up"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings YAML file"),
):
    settings = load_cli_settings(config)
    repo = operations_for(settings)

    try:
        op = repo.get_operation(operation_id)
    except OperationsLoadError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)

    if op is None:
        err_console.print(f'[red]Operation "{operation_id}" not found[/red]')
        raise typer.Exit(code=1)

    table = Table(show_header=False)
    table.add_row("Operation", op.operation_id)
    table.add_row("Method", op.method)
    table.add_row("Path", op.path)
    table.add_row("Summary", op.summary or "N/A")
    table.add_row("Mutation", "yes (audited)" if op.is_mutation else "no")
    if op.deprecated:
        table.add_row("Deprecated", "yes")
    console.print(table)
