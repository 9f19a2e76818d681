"""catalogdb record commands — list, count, show, delete, new.

Usage:
  catalogdb list brands
  catalogdb list materials --parent prusament
  catalogdb list materials --all-parents
  catalogdb show materials pla-galaxy-black --parent prusament
  catalogdb new material-containers --name "Spool 1kg" --set class=SPOOL
  catalogdb new material-packages -p prusament --set material=pla-galaxy-black --set container=spool-1kg
  catalogdb delete brands old-brand --yes
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich.console import Console
from rich.table import Table

from catalogdb.cli.errors import err_bad_assignment, err_config, err_store, warn_degraded_codec
from catalogdb.config import ConfigError, load_config
from catalogdb.store.create import (
    PACKAGE_TYPE,
    create_nested_record,
    create_package_record,
    create_record,
)
from catalogdb.store.errors import StoreError
from catalogdb.store.models import StoredDocument
from catalogdb.store.records import RecordStore

console = Console()

EntityArg = Annotated[str, typer.Argument(help="Entity type, e.g. brands, materials.")]
ParentOpt = Annotated[
    str | None,
    typer.Option("--parent", "-p", help="Parent brand (slug, name or UUID) for nested types."),
]
BaseDirOpt = Annotated[
    Path | None,
    typer.Option("--base-dir", help="Catalog root (directory containing data/). Defaults to CWD."),
]


def list_cmd(
    entity_type: EntityArg,
    parent: ParentOpt = None,
    all_parents: Annotated[
        bool,
        typer.Option("--all-parents", help="List a nested type across every parent."),
    ] = False,
    base_dir: BaseDirOpt = None,
) -> None:
    """List the records of an entity type."""
    store = _open_store(base_dir)
    try:
        if all_parents:
            docs = store.read_all_across_parents(entity_type)
        elif parent:
            docs = store.read_all_by_parent(entity_type, parent)
        else:
            docs = store.read_all(entity_type)
    except StoreError as exc:
        console.print(err_store(exc, entity_type, parent or ""))
        raise typer.Exit(1)

    if not docs:
        console.print(f"[yellow]No {entity_type} records found.[/]")
        raise typer.Exit(0)

    table = _records_table(
        entity_type, docs, show_parent=bool(parent or all_parents), parent_key=store.parent_key
    )
    console.print(table)
    console.print(f"\n  {len(docs)} record(s)")


def count_cmd(
    entity_type: EntityArg,
    parent: ParentOpt = None,
    base_dir: BaseDirOpt = None,
) -> None:
    """Count the record files of an entity type (0 if it has no directory)."""
    store = _open_store(base_dir)
    total = store.count_by_parent(entity_type, parent) if parent else store.count(entity_type)
    typer.echo(str(total))


def show_cmd(
    entity_type: EntityArg,
    identifier: Annotated[str, typer.Argument(help="File name, slug, name or UUID.")],
    parent: ParentOpt = None,
    base_dir: BaseDirOpt = None,
) -> None:
    """Print one record."""
    store = _open_store(base_dir)
    try:
        if parent:
            document = store.read_one_by_parent(entity_type, parent, identifier)
        else:
            document = store.read_one(entity_type, identifier)
    except StoreError as exc:
        console.print(err_store(exc, entity_type, identifier))
        raise typer.Exit(1)

    typer.echo(store.codec.serialize(document), nl=False)


def delete_cmd(
    entity_type: EntityArg,
    identifier: Annotated[str, typer.Argument(help="File name, slug, name or UUID.")],
    parent: ParentOpt = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    base_dir: BaseDirOpt = None,
) -> None:
    """Delete one record file."""
    store = _open_store(base_dir)

    if not yes:
        if not typer.confirm(f"Delete {entity_type} record '{identifier}'?", default=False):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)

    try:
        if parent:
            store.delete_by_parent(entity_type, parent, identifier)
        else:
            store.delete(entity_type, identifier)
    except StoreError as exc:
        console.print(err_store(exc, entity_type, identifier))
        raise typer.Exit(1)

    console.print(f"[green]✓[/] Deleted: {entity_type}/{identifier}")


def new_cmd(
    entity_type: EntityArg,
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Human-readable record name (not needed for packages)."),
    ] = None,
    slug: Annotated[
        str | None,
        typer.Option("--slug", help="Explicit slug (defaults to the slug of --name)."),
    ] = None,
    parent: ParentOpt = None,
    assignments: Annotated[
        list[str] | None,
        typer.Option("--set", help="Extra field as key=value (YAML value). Repeatable."),
    ] = None,
    base_dir: BaseDirOpt = None,
) -> None:
    """Create a new record file with a unique slug and a UUID."""
    payload: dict[str, Any] = {"slug": slug, "name": name}
    for item in assignments or []:
        key, sep, raw = item.partition("=")
        if not sep or not key.strip():
            console.print(err_bad_assignment(item))
            raise typer.Exit(1)
        payload[key.strip()] = yaml.safe_load(raw) if raw else None

    store = _open_store(base_dir)
    if store.codec.degraded:
        console.print(warn_degraded_codec())

    try:
        if parent and entity_type == PACKAGE_TYPE:
            record = create_package_record(store, parent, payload)
        elif parent:
            record = create_nested_record(store, entity_type, parent, payload)
        else:
            record = create_record(store, entity_type, payload)
    except StoreError as exc:
        console.print(err_store(exc, entity_type, parent or ""))
        raise typer.Exit(1)
    except ValueError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/] Created: {entity_type}/{record['slug']}  [dim]({record['uuid']})[/]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _open_store(base_dir: Path | None) -> RecordStore:
    try:
        cfg = load_config(base_dir)
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)
    return cfg.open_store()


def _records_table(
    entity_type: str, docs: list[StoredDocument], *, show_parent: bool, parent_key: str
) -> Table:
    table = Table(title=entity_type, show_header=True, header_style="bold")
    if show_parent:
        table.add_column(parent_key.capitalize(), style="dim", no_wrap=True)
    table.add_column("Slug", style="bold", no_wrap=True)
    table.add_column("Name")
    table.add_column("UUID", style="dim")
    table.add_column("File", style="dim")

    for doc in docs:
        row = [
            str(doc.content.get("slug") or ""),
            str(doc.content.get("name") or ""),
            str(doc.content.get("uuid") or ""),
            doc.source_file,
        ]
        if show_parent:
            row.insert(0, str((doc.content.get(parent_key) or {}).get("slug", "")))
        table.add_row(*row)
    return table
