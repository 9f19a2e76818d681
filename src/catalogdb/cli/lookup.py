"""catalogdb lookup CLI commands.

Commands:
  catalogdb lookup list            — show the allow-listed lookup tables
  catalogdb lookup show <table>    — print the entries of one table
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from catalogdb.cli.errors import err_config, err_lookup_table
from catalogdb.config import ConfigError, load_config
from catalogdb.store.errors import StoreError
from catalogdb.store.lookup import LookupTables

console = Console()

lookup_app = typer.Typer(
    name="lookup",
    help="Read lookup tables (allowed-value enumerations).",
    add_completion=False,
)


@lookup_app.command("list")
def lookup_list_cmd(
    base_dir: Annotated[
        Path | None,
        typer.Option("--base-dir", help="Catalog root. Defaults to CWD."),
    ] = None,
) -> None:
    """List the available lookup tables."""
    tables = _open_lookup(base_dir)

    table = Table(title="Lookup tables", show_header=True, header_style="bold")
    table.add_column("Name", style="bold")
    table.add_column("Status")
    for name in tables.list():
        path = tables.lookup_dir / f"{name}.yaml"
        status = "[green]✓[/]" if path.is_file() else "[yellow]✗ missing[/]"
        table.add_row(name, status)
    console.print(table)


@lookup_app.command("show")
def lookup_show_cmd(
    name: Annotated[str, typer.Argument(help="Lookup table name (e.g. countries).")],
    base_dir: Annotated[
        Path | None,
        typer.Option("--base-dir", help="Catalog root. Defaults to CWD."),
    ] = None,
) -> None:
    """Print the entries of a lookup table."""
    tables = _open_lookup(base_dir)
    try:
        entries = tables.read(name)
    except StoreError as exc:
        console.print(err_lookup_table(name, exc.message))
        raise typer.Exit(1)

    typer.echo(tables.codec.serialize(entries), nl=False)


def _open_lookup(base_dir: Path | None) -> LookupTables:
    try:
        cfg = load_config(base_dir)
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)
    return cfg.open_lookup()
