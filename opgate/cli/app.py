from __future__ import annotations
import typer

from .call     import call_cmd
from .describe import describe_cmd

app = typer.Typer(help="opgate: validate, gate, audit and dispatch remote operations")
app.command("call")(call_cmd)
app.command("describe")(describe_cmd)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
