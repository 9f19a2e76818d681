"""Record store: read/write/delete catalog documents by entity type.

Single interface for flat entity types (``brands``, ``material-containers``)
and for types nested under a parent brand (``materials``,
``material-packages``). Every call reads the filesystem fresh; nothing is
cached between calls and nothing is locked, so concurrent writers to the same
file race and the last one wins.

Identifier resolution, per directory:
  1. direct ``{id}.yaml`` / ``{id}.yml`` lookup — authoritative when present;
  2. otherwise a scan of the collection with ``matcher.find_match``.
"""

from __future__ import annotations

from pathlib import Path

from catalogdb.store.codec import DocumentCodec, select_codec
from catalogdb.store.errors import (
    DirectoryNotFoundError,
    PersistenceError,
    RecordNotFoundError,
    StoreError,
)
from catalogdb.store.matcher import find_match
from catalogdb.store.models import Document, StoredDocument, singular
from catalogdb.store.paths import DirectoryResolver
from catalogdb.store.reader import (
    ContentFilter,
    FileFilter,
    find_document_file,
    list_document_files,
    load_document,
    read_collection,
)


class RecordStore:
    """File-backed record store over one catalog tree.

    Args:
        resolver: Directory resolver; defaults to probing relative to CWD.
        codec: Document codec; defaults to ``select_codec("auto")``.
        parent_type: Entity type that nested types are partitioned by.
    """

    def __init__(
        self,
        resolver: DirectoryResolver | None = None,
        codec: DocumentCodec | None = None,
        *,
        parent_type: str = "brands",
    ) -> None:
        self.resolver = resolver if resolver is not None else DirectoryResolver()
        self.codec = codec if codec is not None else select_codec()
        self.parent_type = parent_type

    @property
    def parent_key(self) -> str:
        """Back-reference field added to nested documents (``"brand"``)."""
        return singular(self.parent_type)

    # ------------------------------------------------------------------
    # Flat entity types
    # ------------------------------------------------------------------

    def read_all(
        self,
        entity_type: str,
        *,
        file_filter: FileFilter | None = None,
        validate: ContentFilter | None = None,
    ) -> list[StoredDocument]:
        """Load every *entity_type* document.

        Raises:
            DirectoryNotFoundError: if the entity directory cannot be located.
        """
        root = self._root(entity_type)
        return read_collection(root, self.codec, file_filter=file_filter, validate=validate)

    def count(self, entity_type: str) -> int:
        """Number of document files for *entity_type*; 0 if it has no directory."""
        root = self.resolver.find_root(entity_type)
        return len(list_document_files(root)) if root is not None else 0

    def read_one(self, entity_type: str, identifier: str) -> Document:
        """Return the document *identifier* refers to.

        Raises:
            DirectoryNotFoundError: if the entity directory cannot be located.
            RecordNotFoundError: if nothing matches *identifier*.
        """
        root = self._root(entity_type)
        document = self._resolve(root, identifier)
        if document is None:
            raise RecordNotFoundError(f"{singular(entity_type)} not found")
        return document

    def write(self, entity_type: str, identifier: str, document: Document | None) -> None:
        """Overwrite the file of an existing record, or delete it if *document* is None.

        Never creates a new file; see ``catalogdb.store.create`` for that.

        Raises:
            DirectoryNotFoundError: if the entity directory cannot be located.
            RecordNotFoundError: if nothing matches *identifier*.
            PersistenceError: if the write or unlink fails.
        """
        self._update_file(self._root(entity_type), identifier, document)

    def delete(self, entity_type: str, identifier: str) -> None:
        """Delete the record *identifier* refers to (``write`` with None)."""
        self.write(entity_type, identifier, None)

    # ------------------------------------------------------------------
    # Entity types nested under a parent
    # ------------------------------------------------------------------

    def find_nested_root(
        self, nested_type: str, parent_id: str, create_if_missing: bool = False
    ) -> Path | None:
        """Directory of *nested_type* records belonging to parent *parent_id*."""
        return self.resolver.find_nested_root(
            nested_type,
            parent_id,
            resolve_parent=self._lookup_parent,
            create_if_missing=create_if_missing,
        )

    def read_all_by_parent(
        self,
        nested_type: str,
        parent_id: str,
        *,
        file_filter: FileFilter | None = None,
        validate: ContentFilter | None = None,
    ) -> list[StoredDocument]:
        """Load every *nested_type* document of one parent.

        Raises:
            RecordNotFoundError: if the parent's directory cannot be resolved.
        """
        directory = self._nested_root_for_read(nested_type, parent_id)
        docs = read_collection(directory, self.codec, file_filter=file_filter, validate=validate)
        return [self._tag(doc, parent_id) for doc in docs]

    def read_all_across_parents(
        self,
        nested_type: str,
        *,
        file_filter: FileFilter | None = None,
        validate: ContentFilter | None = None,
    ) -> list[StoredDocument]:
        """Load *nested_type* documents of every parent subdirectory.

        Each document is tagged with the literal subdirectory name, which need
        not equal the parent's current canonical slug.

        Raises:
            DirectoryNotFoundError: if the nested type's root cannot be located.
            StoreError: if the root cannot be listed.
        """
        root = self._root(nested_type)
        try:
            subdirs = sorted(p for p in root.iterdir() if p.is_dir())
        except OSError as exc:
            raise StoreError(f"Failed to read {nested_type}") from exc

        results: list[StoredDocument] = []
        for subdir in subdirs:
            docs = read_collection(subdir, self.codec, file_filter=file_filter, validate=validate)
            results.extend(self._tag(doc, subdir.name) for doc in docs)
        return results

    def count_by_parent(self, nested_type: str, parent_id: str) -> int:
        """Number of *nested_type* files for one parent; 0 if unresolvable."""
        directory = self.find_nested_root(nested_type, parent_id)
        return len(list_document_files(directory)) if directory is not None else 0

    def read_one_by_parent(self, nested_type: str, parent_id: str, identifier: str) -> Document:
        """Return one nested document, tagged with its parent back-reference.

        Raises:
            RecordNotFoundError: if the parent or the record cannot be resolved.
        """
        directory = self._nested_root_for_read(nested_type, parent_id)
        document = self._resolve(directory, identifier)
        if document is None:
            raise RecordNotFoundError("entity not found")
        return self._with_parent(document, parent_id)

    def write_by_parent(
        self, nested_type: str, parent_id: str, identifier: str, document: Document | None
    ) -> None:
        """``write`` for a nested record.

        Raises:
            DirectoryNotFoundError: if the parent's directory cannot be resolved.
            RecordNotFoundError: if nothing matches *identifier*.
            PersistenceError: if the write or unlink fails.
        """
        directory = self.find_nested_root(nested_type, parent_id)
        if directory is None:
            raise DirectoryNotFoundError(
                f"{nested_type} {self.parent_key} directory not found"
            )
        self._update_file(directory, identifier, document)

    def delete_by_parent(self, nested_type: str, parent_id: str, identifier: str) -> None:
        """Delete one nested record."""
        self.write_by_parent(nested_type, parent_id, identifier, None)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _root(self, entity_type: str) -> Path:
        root = self.resolver.find_root(entity_type)
        if root is None:
            raise DirectoryNotFoundError(f"{entity_type} directory not found")
        return root

    def _nested_root_for_read(self, nested_type: str, parent_id: str) -> Path:
        directory = self.find_nested_root(nested_type, parent_id)
        if directory is None:
            raise RecordNotFoundError(
                f"{nested_type} for {self.parent_key} '{parent_id}' not found"
            )
        return directory

    def _lookup_parent(self, parent_id: str) -> Document | None:
        try:
            return self.read_one(self.parent_type, parent_id)
        except StoreError:
            return None

    def _read_direct(self, directory: Path, identifier: str) -> Document | None:
        """Parse ``{identifier}.yaml`` if it exists; None if absent or unreadable."""
        path = find_document_file(directory, identifier)
        if path is None:
            return None
        try:
            return load_document(path, self.codec)
        except (OSError, ValueError) + self.codec.parse_errors:
            return None

    def _resolve(self, directory: Path, identifier: str) -> Document | None:
        direct = self._read_direct(directory, identifier)
        if direct is not None:
            return direct
        match = find_match(read_collection(directory, self.codec), identifier)
        return dict(match.content) if match is not None else None

    def _update_file(self, directory: Path, identifier: str, document: Document | None) -> None:
        # A failed write through the direct path falls back to the scan.
        direct = find_document_file(directory, identifier)
        if direct is not None:
            try:
                self._apply(direct, document)
                return
            except OSError:
                pass

        match = find_match(read_collection(directory, self.codec), identifier)
        if match is None:
            raise RecordNotFoundError("item not found")
        try:
            self._apply(directory / match.source_file, document)
        except OSError as exc:
            raise PersistenceError("Failed to update file") from exc

    def _apply(self, path: Path, document: Document | None) -> None:
        if document is None:
            path.unlink()
        else:
            path.write_text(self.codec.serialize(document), encoding="utf-8")

    def _with_parent(self, content: Document, parent_id: str) -> Document:
        return {**content, self.parent_key: {"slug": parent_id}}

    def _tag(self, doc: StoredDocument, parent_id: str) -> StoredDocument:
        return StoredDocument(
            source_file=doc.source_file, content=self._with_parent(doc.content, parent_id)
        )
