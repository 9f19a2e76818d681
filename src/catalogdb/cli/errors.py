"""catalogdb rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from catalogdb.cli.errors import err_store
    console.print(err_store(exc, "materials"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape

from catalogdb.store.errors import (
    DirectoryNotFoundError,
    DuplicateRecordError,
    InvalidLookupTableError,
    RecordNotFoundError,
    StoreError,
)


def err_no_directory(entity_type: str, message: str) -> str:
    """Entity directory not found under any candidate root."""
    return (
        f"[red]Error:[/] {escape(message)}.\n"
        f"  Looked for data/{escape(entity_type)} and ../data/{escape(entity_type)} "
        "(and the openprinttag/ equivalents).\n"
        "  Run from the catalog root, or pass:  --base-dir <catalog root>"
    )


def err_record_not_found(entity_type: str, identifier: str, message: str) -> str:
    """No record matched by file name, slug, name or UUID."""
    return (
        f"[red]Error:[/] {escape(message)}: '{escape(identifier)}'.\n"
        "  Identifiers match a file name, a slug, a name or a UUID.\n"
        f"  Run:  catalogdb list {escape(entity_type)}"
    )


def err_duplicate(entity_type: str, message: str) -> str:
    """Creation target already exists."""
    return (
        f"[red]Error:[/] {escape(message)}.\n"
        f"  Pass a different --slug, or edit the existing {escape(entity_type)} record."
    )


def err_lookup_table(name: str, message: str) -> str:
    """Lookup table unknown, missing or malformed."""
    return (
        f"[red]Error:[/] {escape(message)}: '{escape(name)}'.\n"
        "  Run:  catalogdb lookup list  to see the available tables."
    )


def err_store(exc: StoreError, entity_type: str = "", identifier: str = "") -> str:
    """Dispatch a StoreError to its actionable message."""
    if isinstance(exc, DirectoryNotFoundError):
        return err_no_directory(entity_type, exc.message)
    if isinstance(exc, RecordNotFoundError):
        return err_record_not_found(entity_type, identifier, exc.message)
    if isinstance(exc, DuplicateRecordError):
        return err_duplicate(entity_type, exc.message)
    if isinstance(exc, InvalidLookupTableError):
        return err_lookup_table(identifier, exc.message)
    return (
        f"[red]Error:[/] {escape(exc.message)}.\n"
        "  Check file permissions on the catalog data directory."
    )


def err_config(message: str) -> str:
    """Invalid catalogdb.yaml / environment value."""
    return (
        f"[red]Error:[/] Invalid configuration: {escape(message)}\n"
        "  Fix catalogdb.yaml (or the CATALOGDB_* environment variables) and retry."
    )


def err_bad_assignment(item: str) -> str:
    """--set value is not key=value."""
    return (
        f"[red]Error:[/] Expected key=value, got: '{escape(item)}'.\n"
        "  Example:  --set density=1.24"
    )


def warn_degraded_codec() -> str:
    """Shown when records are written without PyYAML."""
    return (
        "[yellow]⚠[/] PyYAML is not installed — records are written in fallback mode.\n"
        "  Install it:  pip install pyyaml"
    )
