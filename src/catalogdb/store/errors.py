"""Store error kinds and warning categories.

Every failure that reaches a caller is a ``StoreError`` subclass carrying an
HTTP-equivalent ``status`` so an outer surface can map it without a lookup
table of its own. Per-file parse failures and degraded serialization are not
errors: they are reported through ``warnings`` and the operation continues.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for all record store failures."""

    status: int = 500

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class DirectoryNotFoundError(StoreError):
    """An entity type's (or nested type's) root directory cannot be located."""

    status = 500


class RecordNotFoundError(StoreError):
    """No record matches the identifier, or a nested parent cannot be resolved."""

    status = 404


class PersistenceError(StoreError):
    """A write or unlink failed after the target file was located."""

    status = 500


class InvalidLookupTableError(StoreError):
    """A lookup table file does not hold a top-level sequence."""

    status = 500


class DuplicateRecordError(StoreError):
    """A creation flow found its target file already present."""

    status = 409


class ParseWarning(UserWarning):
    """A single file failed to parse during a collection scan and was skipped."""


class DegradedCodecWarning(UserWarning):
    """PyYAML is unavailable; documents are read and written in fallback mode."""
