"""catalogdb record store — file-per-record catalog persistence."""

from catalogdb.store.codec import DocumentCodec, FallbackCodec, select_codec
from catalogdb.store.create import (
    create_nested_record,
    create_package_record,
    create_record,
    unique_slug,
)
from catalogdb.store.errors import (
    DegradedCodecWarning,
    DirectoryNotFoundError,
    DuplicateRecordError,
    InvalidLookupTableError,
    ParseWarning,
    PersistenceError,
    RecordNotFoundError,
    StoreError,
)
from catalogdb.store.lookup import LookupTables
from catalogdb.store.matcher import matches
from catalogdb.store.models import StoredDocument
from catalogdb.store.paths import DirectoryResolver
from catalogdb.store.records import RecordStore
from catalogdb.store.slug import slugify_name

__all__ = [
    "DocumentCodec",
    "FallbackCodec",
    "select_codec",
    "RecordStore",
    "DirectoryResolver",
    "LookupTables",
    "StoredDocument",
    "matches",
    "slugify_name",
    "create_record",
    "create_nested_record",
    "create_package_record",
    "unique_slug",
    "StoreError",
    "DirectoryNotFoundError",
    "RecordNotFoundError",
    "PersistenceError",
    "InvalidLookupTableError",
    "DuplicateRecordError",
    "ParseWarning",
    "DegradedCodecWarning",
]
