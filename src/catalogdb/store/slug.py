"""Name -> slug normalisation.

Examples:
    "Prusament PLA Galaxy Black" -> "prusament-pla-galaxy-black"
    "Café   Noir_Brand"          -> "cafe-noir-brand"
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any

_SEPARATOR_RE = re.compile(r"[\s_]+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN_RE = re.compile(r"-+")


def slugify_name(name: Any) -> str | None:
    """Turn a human-readable name into a kebab-case slug.

    Returns None for None or an empty string. Never raises: if Unicode
    decomposition fails (e.g. a non-string YAML scalar such as ``2024``), a
    plain lowercase/hyphenate transform is used instead.
    """
    if not name:
        return None
    try:
        decomposed = unicodedata.normalize("NFKD", name)
        text = "".join(c for c in decomposed if not unicodedata.combining(c))
        text = _SEPARATOR_RE.sub("-", text.lower().strip())
        text = _DISALLOWED_RE.sub("", text)
        return _HYPHEN_RUN_RE.sub("-", text)
    except (TypeError, ValueError):
        text = _SEPARATOR_RE.sub("-", str(name).lower())
        return _HYPHEN_RUN_RE.sub("-", text)
