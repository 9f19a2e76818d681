"""catalogdb CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from catalogdb.cli.lookup import lookup_app
from catalogdb.cli.records import count_cmd, delete_cmd, list_cmd, new_cmd, show_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("catalogdb")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"catalogdb {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="catalogdb",
    help=(
        "catalogdb — file-per-record catalog of brands, materials, packages and containers.\n\n"
        "  Records live in data/{type}/{slug}.yaml, or data/{type}/{brand}/{slug}.yaml\n"
        "  for types nested under a brand. Identifiers may be a file name, slug, name or UUID."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """catalogdb — file-per-record catalog CLI."""


app.command("list")(list_cmd)
app.command("count")(count_cmd)
app.command("show")(show_cmd)
app.command("delete")(delete_cmd)
app.command("new")(new_cmd)
app.add_typer(lookup_app, name="lookup")


@app.command("version")
def version_cmd() -> None:
    """Show the installed catalogdb version."""
    typer.echo(f"catalogdb {_installed_version()}")


if __name__ == "__main__":
    app()
