"""Directory resolution for entity types and brand-nested entity types.

Layout on disk::

    {data}/{entity_type}/{identifier}.yaml                  flat
    {data}/{entity_type}/{parent_slug}/{identifier}.yaml    nested

There is no single configured path: a resolver holds an ordered list of
``CandidateRoot`` probes relative to a base directory (``./data``,
``../data``, ...) and the first one that exists wins. This lets the same
catalog be opened from the repository root or from a subproject.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from catalogdb.store.models import Document, is_plain_name
from catalogdb.store.slug import slugify_name

DEFAULT_ROOTS: tuple[str, ...] = ("data", "../data", "openprinttag", "../openprinttag")
DEFAULT_PRIMARY: tuple[str, ...] = ("data", "../data")

ParentLookup = Callable[[str], Document | None]


@dataclass(frozen=True)
class CandidateRoot:
    """One probe location, relative to the resolver's base directory."""

    relative: str

    def locate(self, base_dir: Path, *parts: str) -> Path:
        return (base_dir / self.relative).joinpath(*parts).resolve()

    def probe(self, base_dir: Path, *parts: str) -> Path | None:
        """The located path if it is an existing directory, else None."""
        path = self.locate(base_dir, *parts)
        return path if path.is_dir() else None


def _first_existing(candidates: Sequence[CandidateRoot], base_dir: Path, *parts: str) -> Path | None:
    for candidate in candidates:
        found = candidate.probe(base_dir, *parts)
        if found is not None:
            return found
    return None


class DirectoryResolver:
    """Finds (and optionally creates) collection directories.

    Args:
        base_dir: Directory the candidates are relative to. Defaults to CWD
            at construction time.
        roots: Candidate collection roots, probed in order as
            ``{base_dir}/{root}/{entity_type}``.
        primary: Candidate data roots used when a missing entity directory has
            to be created.
    """

    def __init__(
        self,
        base_dir: Path | str | None = None,
        *,
        roots: Sequence[str] = DEFAULT_ROOTS,
        primary: Sequence[str] = DEFAULT_PRIMARY,
    ) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self.roots = [CandidateRoot(r) for r in roots]
        self.primary = [CandidateRoot(r) for r in primary]

    def find_data_dir(self) -> Path | None:
        """Return the primary data root (``./data`` or ``../data``), or None."""
        return _first_existing(self.primary, self.base_dir)

    def find_root(self, entity_type: str, create_if_missing: bool = False) -> Path | None:
        """Return the directory holding *entity_type* documents.

        If no candidate exists and *create_if_missing* is set, the directory is
        created under the primary data root. Returns None when nothing was
        found or created (including when there is no data root at all).
        """
        if not is_plain_name(entity_type):
            return None
        found = _first_existing(self.roots, self.base_dir, entity_type)
        if found is not None or not create_if_missing:
            return found

        data_dir = self.find_data_dir()
        if data_dir is None:
            return None
        new_dir = data_dir / entity_type
        new_dir.mkdir(parents=True, exist_ok=True)
        return new_dir

    def find_nested_root(
        self,
        nested_type: str,
        parent_id: str,
        *,
        resolve_parent: ParentLookup | None = None,
        create_if_missing: bool = False,
    ) -> Path | None:
        """Return ``{root of nested_type}/{parent}`` for one parent record.

        Tried in order:
          1. a subdirectory literally named *parent_id*;
          2. the parent's canonical slug (``slug`` field, else slug of ``name``)
             obtained from *resolve_parent*, probed and created if requested;
          3. with *create_if_missing*, the literal *parent_id* directory is created.
        """
        root = self.find_root(nested_type, create_if_missing)
        if root is None:
            return None

        literal = root / parent_id if is_plain_name(parent_id) else None
        if literal is not None and literal.is_dir():
            return literal

        parent = resolve_parent(parent_id) if resolve_parent is not None else None
        if parent is not None:
            slug = parent.get("slug") or slugify_name(parent.get("name"))
            if slug and is_plain_name(str(slug)):
                slug_dir = root / str(slug)
                if slug_dir.is_dir():
                    return slug_dir
                if create_if_missing:
                    slug_dir.mkdir(parents=True, exist_ok=True)
                    return slug_dir

        if create_if_missing and literal is not None:
            literal.mkdir(parents=True, exist_ok=True)
            return literal
        return None
