"""Read-only lookup tables (enumerations of allowed values).

Each table is one file ``{lookup_dir}/{name}.yaml`` holding a top-level
sequence. Only names on the allow-list resolve; the allow-list is fixed when
the reader is constructed and never changes afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from catalogdb.store.codec import DocumentCodec, select_codec
from catalogdb.store.errors import InvalidLookupTableError, RecordNotFoundError

DEFAULT_LOOKUP_TABLES: frozenset[str] = frozenset(
    [
        "material_certifications",
        "material_tags",
        "material_types",
        "material_tag_categories",
        "material_photo_types",
        "brand_link_pattern_types",
        "countries",
    ]
)


class LookupTables:
    """Allow-listed access to lookup table files in *lookup_dir*."""

    def __init__(
        self,
        lookup_dir: Path | str,
        tables: Iterable[str] = DEFAULT_LOOKUP_TABLES,
        codec: DocumentCodec | None = None,
    ) -> None:
        self.lookup_dir = Path(lookup_dir)
        self.tables: frozenset[str] = frozenset(tables)
        self.codec = codec if codec is not None else select_codec()

    def list(self) -> list[str]:
        """Allow-listed table names, sorted."""
        return sorted(self.tables)

    def read(self, name: str) -> list[Any]:
        """Return the entries of table *name*.

        Raises:
            RecordNotFoundError: if *name* is not allow-listed or its file
                cannot be read or parsed.
            InvalidLookupTableError: if the file does not hold a sequence.
        """
        if name not in self.tables:
            raise RecordNotFoundError("Lookup table not found")
        path = self.lookup_dir / f"{name}.yaml"
        try:
            data = self.codec.parse(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) + self.codec.parse_errors as exc:
            raise RecordNotFoundError("Lookup table not found") from exc
        if not isinstance(data, list):
            raise InvalidLookupTableError("Invalid lookup table file (expected array)")
        return data
