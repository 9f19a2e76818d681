"""catalogdb configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (CATALOGDB_BASE_DIR, CATALOGDB_LOOKUP_DIR, CATALOGDB_CODEC)
  3. Per-project catalogdb.yaml  (in the base directory)
  4. Global ~/.catalogdb/config.yaml
  5. Hardcoded defaults

All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from catalogdb.store.codec import CODEC_MODES, select_codec
from catalogdb.store.lookup import DEFAULT_LOOKUP_TABLES, LookupTables
from catalogdb.store.models import is_plain_name
from catalogdb.store.paths import DEFAULT_PRIMARY, DEFAULT_ROOTS, DirectoryResolver
from catalogdb.store.records import RecordStore

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_PATH: Path = Path.home() / ".catalogdb" / "config.yaml"
_PROJECT_CONFIG_NAME: str = "catalogdb.yaml"

# Known top-level sections — unknown keys produce a warning
_KNOWN_SECTIONS: frozenset[str] = frozenset(["data", "nesting", "lookup", "codec"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class DataCfg:
    """Where entity collections live (catalogdb.yaml: data:).

    Attributes:
        base_dir: Directory the candidate roots are relative to. None = CWD.
        roots: Candidate collection roots, probed in order.
        primary: Candidate data roots for creating missing entity directories.
    """

    base_dir: str | None = None
    roots: list[str] = field(default_factory=lambda: list(DEFAULT_ROOTS))
    primary: list[str] = field(default_factory=lambda: list(DEFAULT_PRIMARY))


@dataclass
class NestingCfg:
    """Parent collection for nested entity types (catalogdb.yaml: nesting:)."""

    parent: str = "brands"


@dataclass
class LookupCfg:
    """Lookup table location and allow-list (catalogdb.yaml: lookup:)."""

    dir: str = "../openprinttag/data"  # relative to data.base_dir
    tables: list[str] = field(default_factory=lambda: sorted(DEFAULT_LOOKUP_TABLES))


@dataclass
class CodecCfg:
    """Document codec selection (catalogdb.yaml: codec:)."""

    mode: str = "auto"  # auto | yaml | fallback


@dataclass
class CatalogConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    data: DataCfg = field(default_factory=DataCfg)
    nesting: NestingCfg = field(default_factory=NestingCfg)
    lookup: LookupCfg = field(default_factory=LookupCfg)
    codec: CodecCfg = field(default_factory=CodecCfg)

    @property
    def base_path(self) -> Path:
        return Path(self.data.base_dir) if self.data.base_dir else Path.cwd()

    @property
    def lookup_path(self) -> Path:
        return self.base_path / self.lookup.dir

    def open_store(self) -> RecordStore:
        """Build a RecordStore for this configuration."""
        resolver = DirectoryResolver(
            self.base_path, roots=self.data.roots, primary=self.data.primary
        )
        return RecordStore(
            resolver, select_codec(self.codec.mode), parent_type=self.nesting.parent
        )

    def open_lookup(self) -> LookupTables:
        """Build a LookupTables reader for this configuration."""
        return LookupTables(
            self.lookup_path, self.lookup.tables, select_codec(self.codec.mode)
        )


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _str_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ConfigError(f"'{key}' must be a list of non-empty strings, got: {value!r}")
    return list(value)


def _validate(cfg: CatalogConfig) -> None:
    if cfg.codec.mode not in CODEC_MODES:
        raise ConfigError(
            f"codec.mode must be one of {', '.join(sorted(CODEC_MODES))}, "
            f"got: '{cfg.codec.mode}'"
        )
    for name in cfg.lookup.tables:
        if not is_plain_name(name):
            raise ConfigError(
                f"lookup.tables entry '{name}' must be a plain table name, not a path"
            )
    if not is_plain_name(cfg.nesting.parent):
        raise ConfigError(f"nesting.parent must be an entity type name, got: '{cfg.nesting.parent}'")


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _read_layer(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level.")
    _warn_unknown_keys(raw, path)
    return raw


def _cfg_from_dict(data: dict[str, Any]) -> CatalogConfig:
    """Build a *CatalogConfig* from a merged raw YAML dict."""
    cfg = CatalogConfig()

    if "data" in data:
        d = data["data"] or {}
        cfg.data = DataCfg(
            base_dir=d.get("base_dir") or cfg.data.base_dir,
            roots=_str_list(d["roots"], "data.roots") if "roots" in d else cfg.data.roots,
            primary=_str_list(d["primary"], "data.primary") if "primary" in d else cfg.data.primary,
        )

    if "nesting" in data:
        n = data["nesting"] or {}
        cfg.nesting = NestingCfg(parent=str(n.get("parent", cfg.nesting.parent)))

    if "lookup" in data:
        lk = data["lookup"] or {}
        cfg.lookup = LookupCfg(
            dir=str(lk.get("dir", cfg.lookup.dir)),
            tables=_str_list(lk["tables"], "lookup.tables") if "tables" in lk else cfg.lookup.tables,
        )

    if "codec" in data:
        c = data["codec"] or {}
        cfg.codec = CodecCfg(mode=str(c.get("mode", cfg.codec.mode)))

    return cfg


def _apply_env_overrides(cfg: CatalogConfig) -> CatalogConfig:
    """Apply CATALOGDB_* environment variable overrides."""
    if base_dir := os.environ.get("CATALOGDB_BASE_DIR"):
        cfg.data.base_dir = base_dir
    if lookup_dir := os.environ.get("CATALOGDB_LOOKUP_DIR"):
        cfg.lookup.dir = lookup_dir
    if mode := os.environ.get("CATALOGDB_CODEC"):
        cfg.codec.mode = mode
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> CatalogConfig:
    """Load and return a merged *CatalogConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *catalogdb.yaml*. Defaults to CWD.
            Also becomes ``data.base_dir`` unless a layer sets one.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *CatalogConfig* with env var overrides applied.

    Raises:
        ConfigError: If a layer holds an invalid value.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        merged = _deep_merge(merged, _read_layer(global_path))

    # Layer 2: per-project config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        merged = _deep_merge(merged, _read_layer(project_cfg_path))

    cfg = _cfg_from_dict(merged)
    if cfg.data.base_dir is None:
        cfg.data.base_dir = str(search_dir)
    elif not Path(cfg.data.base_dir).is_absolute():
        cfg.data.base_dir = str(search_dir / cfg.data.base_dir)

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)

    _validate(cfg)
    return cfg
