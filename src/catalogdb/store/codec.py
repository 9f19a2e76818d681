"""Document codec: YAML text <-> Python objects, with a degraded fallback.

Two implementations share the ``DocumentCodec`` interface:

  * ``YamlCodec`` (``catalogdb.store.yaml_codec``) — PyYAML ``safe_load`` and a
    deterministic dumper. The normal path.
  * ``FallbackCodec`` — used only when PyYAML cannot be imported. Parses flat
    ``key: value`` lines and writes JSON under a marker comment, so tooling can
    detect files written in degraded mode.

``select_codec()`` picks one; the record store calls it once at construction.
Every serialized document ends with exactly one newline whichever path runs.
"""

from __future__ import annotations

import importlib.util
import json
import warnings
from abc import ABC, abstractmethod
from typing import Any

from catalogdb.store.errors import DegradedCodecWarning

CODEC_MODES: frozenset[str] = frozenset(["auto", "yaml", "fallback"])

FALLBACK_HEADER = (
    "# NOTE: YAML library unavailable at runtime, "
    "writing JSON-like content as a fallback.\n"
)


class DocumentCodec(ABC):
    """Parse and serialize single documents."""

    name: str = ""
    degraded: bool = False
    # Exception types that mean "this text is malformed" for this codec.
    parse_errors: tuple[type[Exception], ...] = ()

    @abstractmethod
    def parse(self, text: str) -> Any:
        """Parse *text* into a Python value (usually a dict)."""

    @abstractmethod
    def dump(self, document: Any) -> str:
        """Render *document* as text. Trailing newlines are normalised by serialize()."""

    def serialize(self, document: Any) -> str:
        """Render *document*, terminated by exactly one newline."""
        return self.dump(document).rstrip("\n") + "\n"


class FallbackCodec(DocumentCodec):
    """Best-effort codec for environments without PyYAML.

    Nested structures are not supported when parsing: indented lines are read
    as if they were top-level ``key: value`` pairs.
    """

    name = "fallback"
    degraded = True

    def parse(self, text: str) -> dict[str, Any]:
        obj: dict[str, Any] = {}
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            key, sep, rest = line.partition(":")
            if not sep:
                continue
            value: Any = rest.strip()
            if value in ("null", "~"):
                value = None
            elif len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
                value = value[1:-1]
            obj[key.strip()] = value
        return obj

    def dump(self, document: Any) -> str:
        return FALLBACK_HEADER + json.dumps(
            document, indent=2, ensure_ascii=False, default=str
        )


def yaml_available() -> bool:
    """True if PyYAML can be imported in this interpreter."""
    return importlib.util.find_spec("yaml") is not None


def select_codec(mode: str = "auto") -> DocumentCodec:
    """Return the codec for *mode* ("auto", "yaml" or "fallback").

    "auto" prefers PyYAML and degrades to ``FallbackCodec`` with a
    ``DegradedCodecWarning`` when it is missing. "yaml" never degrades.

    Raises:
        ValueError: if *mode* is not a known codec mode.
    """
    if mode not in CODEC_MODES:
        raise ValueError(
            f"Unknown codec mode '{mode}' (expected one of: {', '.join(sorted(CODEC_MODES))})"
        )
    if mode == "fallback":
        return FallbackCodec()
    if mode == "auto" and not yaml_available():
        warnings.warn(
            "PyYAML is not installed; catalog documents will be written in "
            "fallback mode (JSON under a marker comment).",
            DegradedCodecWarning,
            stacklevel=2,
        )
        return FallbackCodec()

    from catalogdb.store.yaml_codec import YamlCodec

    return YamlCodec()
