"""Identifier matching against loaded documents.

A caller-supplied identifier may be a slug, a filename stem, a name, or a
UUID. ``MATCH_RULES`` lists the checks in priority order; a document matches
if any rule holds. Direct ``{id}.yaml`` lookup is not a rule here: the record
store tries it first, before loading a whole collection.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from catalogdb.store.models import StoredDocument
from catalogdb.store.slug import slugify_name

MatchRule = Callable[[StoredDocument, str], bool]


def _by_slug(doc: StoredDocument, identifier: str) -> bool:
    return doc.content.get("slug") == identifier


def _by_file_stem(doc: StoredDocument, identifier: str) -> bool:
    return doc.stem == identifier


def _by_name_slug(doc: StoredDocument, identifier: str) -> bool:
    return slugify_name(doc.content.get("name")) == identifier


def _by_uuid(doc: StoredDocument, identifier: str) -> bool:
    uuid = doc.content.get("uuid")
    return uuid is not None and str(uuid) == identifier


MATCH_RULES: tuple[tuple[str, MatchRule], ...] = (
    ("slug", _by_slug),
    ("file", _by_file_stem),
    ("name", _by_name_slug),
    ("uuid", _by_uuid),
)


def match_rule(doc: StoredDocument | None, identifier: str | None) -> str | None:
    """Name of the first rule under which *doc* matches *identifier*, else None."""
    if doc is None or not identifier:
        return None
    for rule_name, rule in MATCH_RULES:
        if rule(doc, identifier):
            return rule_name
    return None


def matches(doc: StoredDocument | None, identifier: str | None) -> bool:
    """True if *identifier* refers to *doc* by slug, file stem, name or UUID."""
    return match_rule(doc, identifier) is not None


def find_match(docs: Iterable[StoredDocument], identifier: str) -> StoredDocument | None:
    """First document in *docs* that *identifier* refers to, or None.

    With several candidates the earliest in iteration order wins; the
    collection reader iterates files in sorted filename order.
    """
    return next((doc for doc in docs if matches(doc, identifier)), None)
