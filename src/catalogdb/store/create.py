"""Creation flows: pick a slug and a UUID, then write a brand-new record file.

``RecordStore.write`` only ever updates existing files. New records go
through here, which chooses the filename before persisting.

Slug uniqueness is check-then-write: the existing slugs are read, a free one
is chosen, then the file is written. Two concurrent creations with the same
base name can both pick the same slug; the second write replaces the first.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol

from catalogdb.store.errors import (
    DirectoryNotFoundError,
    DuplicateRecordError,
    PersistenceError,
    RecordNotFoundError,
    StoreError,
)
from catalogdb.store.models import Document, is_plain_name, singular
from catalogdb.store.reader import find_document_file
from catalogdb.store.records import RecordStore
from catalogdb.store.slug import slugify_name


class UuidFactory(Protocol):
    """Supplies record UUIDs. Swap in a project-specific scheme if needed."""

    def random(self) -> str: ...

    def derived(self, parent_uuid: str, value: str) -> str: ...


class DefaultUuidFactory:
    """UUIDv4 for top-level records; UUIDv5 in the parent's namespace for nested ones."""

    def random(self) -> str:
        return str(uuid.uuid4())

    def derived(self, parent_uuid: str, value: str) -> str:
        return str(uuid.uuid5(uuid.UUID(str(parent_uuid)), value))


def unique_slug(base: str, existing: Iterable[str]) -> str:
    """Return *base*, or ``base-2``, ``base-3``, ... whichever is not in *existing*."""
    taken = set(existing)
    slug = base
    counter = 2
    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def _compact(payload: Mapping[str, Any], skip: Iterable[str]) -> Document:
    skipped = set(skip)
    return {k: v for k, v in payload.items() if k not in skipped and v is not None}


def create_record(
    store: RecordStore,
    entity_type: str,
    payload: Mapping[str, Any],
    *,
    uuids: UuidFactory | None = None,
) -> Document:
    """Create a new top-level record of *entity_type* from *payload*.

    The slug is ``payload["slug"]`` or the slug of ``payload["name"]``. Field
    order in the file: ``uuid``, ``slug``, then the remaining payload fields;
    None values are dropped.

    Raises:
        ValueError: if no usable slug can be derived from the payload.
        DirectoryNotFoundError: if the entity directory cannot be created.
        DuplicateRecordError: if a file for the slug already exists.
        PersistenceError: if the file cannot be written.
    """
    uuids = uuids if uuids is not None else DefaultUuidFactory()
    slug = payload.get("slug") or slugify_name(payload.get("name"))
    if not slug or not is_plain_name(str(slug)):
        raise ValueError("Could not generate slug from name")
    slug = str(slug)

    directory = store.resolver.find_root(entity_type, create_if_missing=True)
    if directory is None:
        raise DirectoryNotFoundError(f"Could not find or create {entity_type} directory")
    if find_document_file(directory, slug) is not None:
        raise DuplicateRecordError(
            f"{singular(entity_type).capitalize()} with this slug already exists"
        )

    record: Document = {"uuid": uuids.random(), "slug": slug}
    record.update(_compact(payload, skip=("uuid", "slug")))
    _write_new(store, directory / f"{slug}.yaml", record)
    return record


def create_nested_record(
    store: RecordStore,
    nested_type: str,
    parent_id: str,
    payload: Mapping[str, Any],
    *,
    uuids: UuidFactory | None = None,
) -> Document:
    """Create a new *nested_type* record under parent *parent_id*.

    The slug starts from ``payload["slug"]``, else the slug of
    ``payload["name"]``, and is made unique across the existing slugs of every
    parent. The UUID is derived from the parent's UUID and the record name.
    Field order: ``uuid``, ``slug``, parent back-reference, then the payload.

    Nothing is created on disk until the slug and UUID are settled.

    Raises:
        RecordNotFoundError: if the parent does not exist or has no UUID.
        ValueError: if the payload slug is not a plain file name, or the
            parent UUID is malformed.
        DirectoryNotFoundError: if the nested directory cannot be created.
        PersistenceError: if the file cannot be written.
    """
    uuids = uuids if uuids is not None else DefaultUuidFactory()
    parent = _require_parent(store, parent_id)

    base = (
        payload.get("slug")
        or slugify_name(payload.get("name"))
        or f"{singular(nested_type)}-{int(time.time() * 1000)}"
    )
    if not is_plain_name(str(base)):
        raise ValueError(f"Invalid slug: {base!r}")
    slug = unique_slug(str(base), _existing_slugs(store, nested_type))

    name = payload.get("name")
    record: Document = {
        "uuid": uuids.derived(parent["uuid"], str(name) if name else slug),
        "slug": slug,
        store.parent_key: {"slug": parent_id},
    }
    record.update(_compact(payload, skip=("uuid", "slug", store.parent_key)))

    directory = _nested_dir(store, nested_type, parent_id)
    _write_new(store, directory / f"{slug}.yaml", record)
    return record


PACKAGE_TYPE = "material-packages"

# Package fields in file order after uuid/slug/brand. Absent values are
# dropped, except these measurements which are always written (null if unset).
_PACKAGE_FIELDS: tuple[str, ...] = ("brand_specific_id", "gtin", "container", "material", "url")
_PACKAGE_MEASUREMENTS: tuple[str, ...] = (
    "nominal_netto_full_weight",
    "filament_diameter",
    "filament_diameter_tolerance",
    "nominal_full_length",
)


def _reference_slug(value: Any) -> str | None:
    """Slug of a ``{slug: ...}`` reference, or the reference itself if it is a string."""
    if isinstance(value, Mapping):
        value = value.get("slug")
    return str(value) if value else None


def create_package_record(
    store: RecordStore,
    parent_id: str,
    payload: Mapping[str, Any],
    *,
    nested_type: str = PACKAGE_TYPE,
    uuids: UuidFactory | None = None,
) -> Document:
    """Create a material package under brand *parent_id*.

    Packages are keyed by what they contain, not by a name:

    * slug: ``payload["slug"]``, else ``{material}-{container}`` lowercased;
    * UUID: derived from the brand UUID and the ``gtin``, else the
      ``{material}-{container}`` key, so the same package always gets the
      same UUID;
    * ``class`` defaults to ``FFF``.

    ``material`` / ``container`` may be ``{slug: ...}`` references or plain
    strings; ``material_slug`` / ``container_slug`` are accepted as aliases.

    Raises:
        ValueError: if no material is given or the slug is not a plain name.
        RecordNotFoundError: if the brand does not exist or has no UUID.
        DuplicateRecordError: if a package file with the slug already exists.
        PersistenceError: if the file cannot be written.
    """
    uuids = uuids if uuids is not None else DefaultUuidFactory()
    material = payload.get("material") or payload.get("material_slug")
    material_ref = _reference_slug(payload.get("material")) or _reference_slug(
        payload.get("material_slug")
    )
    if not material_ref:
        raise ValueError("Material is required")
    parent = _require_parent(store, parent_id)

    container_ref = (
        _reference_slug(payload.get("container"))
        or _reference_slug(payload.get("container_slug"))
        or "unknown"
    )
    key = f"{material_ref}-{container_ref}"
    slug = str(payload.get("slug") or key.lower())
    if not is_plain_name(slug):
        raise ValueError(f"Invalid slug: {slug!r}")
    gtin = payload.get("gtin")
    package_uuid = uuids.derived(parent["uuid"], str(gtin) if gtin else key)

    record: Document = {
        "uuid": package_uuid,
        "slug": slug,
        store.parent_key: {"slug": parent_id},
        "class": payload.get("class") or "FFF",
    }
    values = {
        **payload,
        "container": payload.get("container") or payload.get("container_slug"),
        "material": material,
    }
    record.update(_compact({f: values.get(f) for f in _PACKAGE_FIELDS}, skip=()))
    record.update({f: payload.get(f) for f in _PACKAGE_MEASUREMENTS})
    taken = set(record) | {"material_slug", "container_slug"}
    record.update(_compact(payload, skip=taken))

    directory = _nested_dir(store, nested_type, parent_id)
    if find_document_file(directory, slug) is not None:
        raise DuplicateRecordError("Package with this slug already exists")
    _write_new(store, directory / f"{slug}.yaml", record)
    return record


def _require_parent(store: RecordStore, parent_id: str) -> Document:
    """The parent record, which must carry a UUID."""
    try:
        parent = store.read_one(store.parent_type, parent_id)
    except StoreError as exc:
        raise RecordNotFoundError(
            f"{store.parent_key.capitalize()} '{parent_id}' not found or missing UUID"
        ) from exc
    if not parent.get("uuid"):
        raise RecordNotFoundError(
            f"{store.parent_key.capitalize()} '{parent_id}' not found or missing UUID"
        )
    return parent


def _existing_slugs(store: RecordStore, nested_type: str) -> set[str]:
    """File stems and slugs of *nested_type* records under every parent."""
    if store.resolver.find_root(nested_type) is None:
        return set()
    existing: set[str] = set()
    for doc in store.read_all_across_parents(nested_type):
        existing.add(doc.stem)
        if doc.content.get("slug"):
            existing.add(str(doc.content["slug"]))
    return existing


def _nested_dir(store: RecordStore, nested_type: str, parent_id: str) -> Path:
    directory = store.find_nested_root(nested_type, parent_id, create_if_missing=True)
    if directory is None:
        raise DirectoryNotFoundError(
            f"Could not find or create {nested_type} directory for "
            f"{store.parent_key} '{parent_id}'"
        )
    return directory


def _write_new(store: RecordStore, path: Path, record: Document) -> None:
    try:
        path.write_text(store.codec.serialize(record), encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Failed to write {path.name}") from exc
