"""Collection reader: load every document file in one directory.

One bad file never fails a scan; it is reported with a ``ParseWarning`` and
skipped. A missing directory reads as an empty collection.
"""

from __future__ import annotations

import warnings
from collections.abc import Callable
from pathlib import Path
from typing import Any

from catalogdb.store.codec import DocumentCodec
from catalogdb.store.errors import ParseWarning
from catalogdb.store.models import (
    DOCUMENT_EXTENSIONS,
    Document,
    StoredDocument,
    is_document_file,
    is_plain_name,
)

FileFilter = Callable[[str], bool]
ContentFilter = Callable[[Document], bool]


def list_document_files(directory: Path) -> list[str]:
    """Sorted names of the .yaml/.yml files directly inside *directory*.

    Returns an empty list if *directory* does not exist or cannot be listed.
    """
    try:
        return sorted(
            p.name for p in directory.iterdir() if p.is_file() and is_document_file(p.name)
        )
    except OSError:
        return []


def find_document_file(directory: Path, identifier: str) -> Path | None:
    """Return ``{directory}/{identifier}.yaml`` (or ``.yml``) if it exists.

    Identifiers that are not plain file stems (path separators, "." or "..")
    never resolve here; the caller falls back to a collection scan.
    """
    if not is_plain_name(identifier):
        return None
    for ext in DOCUMENT_EXTENSIONS:
        candidate = directory / f"{identifier}{ext}"
        if candidate.is_file():
            return candidate
    return None


def load_document(path: Path, codec: DocumentCodec) -> Document:
    """Read and parse one document file.

    An empty file parses to an empty document.

    Raises:
        OSError: if the file cannot be read.
        ValueError: if the top-level value is not a mapping.
        codec.parse_errors: if the text is malformed.
    """
    parsed: Any = codec.parse(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(
            f"expected a mapping at the top level, got {type(parsed).__name__}"
        )
    return parsed


def read_collection(
    directory: Path,
    codec: DocumentCodec,
    *,
    file_filter: FileFilter | None = None,
    validate: ContentFilter | None = None,
) -> list[StoredDocument]:
    """Load every document in *directory*.

    Args:
        directory: Collection directory (not recursed into).
        codec: Codec used to parse each file.
        file_filter: Optional predicate on the file name; False skips the file
            without reading it.
        validate: Optional predicate on the parsed content; False drops the
            document from the result.

    Returns:
        StoredDocument per kept file, in sorted filename order.
    """
    errors = (OSError, ValueError) + codec.parse_errors
    results: list[StoredDocument] = []
    for file_name in list_document_files(directory):
        if file_filter is not None and not file_filter(file_name):
            continue
        try:
            content = load_document(directory / file_name, codec)
        except errors as exc:
            warnings.warn(
                f"Failed to parse file {file_name} in {directory}: {exc}",
                ParseWarning,
                stacklevel=2,
            )
            continue
        if validate is not None and not validate(content):
            continue
        results.append(StoredDocument(source_file=file_name, content=content))
    return results
