"""Value types for the record store."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

# Recognised document extensions, in direct-lookup order.
DOCUMENT_EXTENSIONS: tuple[str, ...] = (".yaml", ".yml")

_DOCUMENT_RE = re.compile(r"\.ya?ml$", re.IGNORECASE)

Document = dict[str, Any]


def is_document_file(file_name: str) -> bool:
    """True if *file_name* carries a structured-data extension (.yaml / .yml)."""
    return bool(_DOCUMENT_RE.search(file_name))


def file_stem(file_name: str) -> str:
    """Strip the document extension: ``"pla.yaml"`` -> ``"pla"``."""
    return _DOCUMENT_RE.sub("", file_name)


def singular(entity_type: str) -> str:
    """Naive singular form: drop one trailing "s" (``"brands"`` -> ``"brand"``)."""
    return entity_type[:-1] if entity_type.endswith("s") else entity_type


@dataclass
class StoredDocument:
    """A parsed document together with the file it was read from.

    ``source_file`` is bookkeeping only; it never appears inside ``content``
    and is never serialized.
    """

    source_file: str
    content: Document = field(default_factory=dict)

    @property
    def stem(self) -> str:
        return file_stem(self.source_file)


def is_plain_name(identifier: str) -> bool:
    """True if *identifier* can name a single file or directory (no path parts)."""
    return bool(identifier) and identifier not in (".", "..") and not any(
        sep in identifier for sep in ("/", "\\", "\0")
    )
