"""
opgate.cli.call
===============

Invoke one operation through the full gateway pipeline and print the
normalized response.

    $ opgate call get_issue -p issueIdOrKey=PROJ-1
    $ opgate call create_issue --params-json '{"fields": {"summary": "x"}}'
    $ opgate call create_issue -p summary=x --dry-run

Exit status is 1 when the response is an error.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer

from opgate.core.exceptions        import InputValidationError, SettingsError
from opgate.core.models            import InvocationRequest
from opgate.core.services.gateway  import as_validation_outcome, parse_request
from opgate.core.utils.aio         import resolve

from .utils import (
    build_gateway,
    console,
    err_console,
    load_cli_settings,
    parse_param_pairs,
    validator_for,
)


# ------------------------------------------------------------------ helpers
async def _dry_run(settings, request: InvocationRequest) -> dict:
    parsed = parse_request(request)
    outcome = as_validation_outcome(
        await resolve(validator_for(settings).validate(parsed.operation_id, parsed.parameters))
    )
    if outcome.success:
        return {"valid": True, "operation_id": parsed.operation_id, "parameters": outcome.data}
    return {"valid": False, "operation_id": parsed.operation_id, "errors": outcome.errors}


# ------------------------------------------------------------------ Typer command implementation
def call_cmd(
    operation_id: str = typer.Argument(..., help="Operation id to invoke"),
    param: Optional[List[str]] = typer.Option(None, "--param", "-p", help="key=value (repeatable)"),
    params_json: Optional[str] = typer.Option(None, "--params-json", help="Parameters as a JSON object"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings YAML file"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw response only"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Parse and validate, do not dispatch"),
):
    if param and params_json is not None:
        raise typer.BadParameter("--param and --params-json are mutually exclusive")

    parameters = params_json if params_json is not None else parse_param_pairs(param or [])
    request = InvocationRequest(operation_id=operation_id, parameters=parameters)
    settings = load_cli_settings(config)

    # -------------------- dry run: parse + validate only ----------------
    if dry_run:
        try:
            report = asyncio.run(_dry_run(settings, request))
        except InputValidationError as exc:
            err_console.print(f"[red]Invalid request:[/red] {exc}")
            raise typer.Exit(code=1)
        except SettingsError as exc:
            err_console.print(f"[red]Configuration error:[/red] {exc}")
            raise typer.Exit(code=2)
        typer.echo(json.dumps(report, indent=2))
        raise typer.Exit(code=0 if report["valid"] else 1)

    # -------------------- full invocation -------------------------------
    try:
        gateway = build_gateway(settings)
    except SettingsError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=2)

    try:
        response = asyncio.run(gateway.invoke_response(request))
    finally:
        gateway.close()
    text = response["content"][0]["text"]

    if as_json:
        typer.echo(text)
    elif response.get("isError"):
        err_console.print("[red]✗ Operation failed[/red]")
        typer.echo(text)
    else:
        console.print("[green]✓ Operation completed successfully[/green]")
        typer.echo(text)

    if response.get("isError"):
        raise typer.Exit(code=1)
