"""CLI application for schema catalog row tooling."""

import typer

from cqlschema.cli.commands.rows import inspect, layouts

app = typer.Typer(
    help="cqlschema - classify system catalog rows for schema refreshes",
    no_args_is_help=True,
)

app.command("inspect")(inspect)
app.command("layouts")(layouts)


if __name__ == "__main__":
    app()
