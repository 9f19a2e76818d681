"""Tests for catalogdb config loader."""

from __future__ import annotations

import warnings
from pathlib import Path

import pytest
import yaml

from catalogdb.config import CatalogConfig, ConfigError, load_config
from catalogdb.store.codec import FallbackCodec
from catalogdb.store.lookup import DEFAULT_LOOKUP_TABLES


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_yaml(path: Path, data: dict) -> None:
    path.write_text(yaml.dump(data), encoding="utf-8")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("CATALOGDB_BASE_DIR", "CATALOGDB_LOOKUP_DIR", "CATALOGDB_CODEC"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def no_global(tmp_path: Path) -> Path:
    return tmp_path / "nonexistent" / "config.yaml"


# ---------------------------------------------------------------------------
# Defaults — no config files present
# ---------------------------------------------------------------------------


def test_load_config_defaults_no_files(tmp_path: Path, no_global: Path) -> None:
    """No config files → all hardcoded defaults, base_dir = project dir."""
    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)

    assert cfg.data.base_dir == str(tmp_path)
    assert cfg.data.roots == ["data", "../data", "openprinttag", "../openprinttag"]
    assert cfg.data.primary == ["data", "../data"]
    assert cfg.nesting.parent == "brands"
    assert cfg.lookup.dir == "../openprinttag/data"
    assert cfg.lookup.tables == sorted(DEFAULT_LOOKUP_TABLES)
    assert cfg.codec.mode == "auto"


def test_catalog_config_base_path_defaults_to_cwd() -> None:
    assert CatalogConfig().base_path == Path.cwd()


# ---------------------------------------------------------------------------
# Layering
# ---------------------------------------------------------------------------


def test_load_config_global_overrides_defaults(tmp_path: Path) -> None:
    global_cfg = tmp_path / "config.yaml"
    _write_yaml(global_cfg, {"codec": {"mode": "fallback"}})

    cfg = load_config(project_dir=tmp_path, global_config_path=global_cfg)
    assert cfg.codec.mode == "fallback"
    assert cfg.nesting.parent == "brands"


def test_load_config_global_empty_file(tmp_path: Path) -> None:
    """Empty global config file → defaults (no crash)."""
    global_cfg = tmp_path / "config.yaml"
    global_cfg.write_text("", encoding="utf-8")

    cfg = load_config(project_dir=tmp_path, global_config_path=global_cfg)
    assert cfg.codec.mode == "auto"


def test_load_config_project_overrides_global(tmp_path: Path) -> None:
    global_cfg = tmp_path / "global.yaml"
    _write_yaml(global_cfg, {"codec": {"mode": "fallback"}, "nesting": {"parent": "vendors"}})
    _write_yaml(tmp_path / "catalogdb.yaml", {"codec": {"mode": "yaml"}})

    cfg = load_config(project_dir=tmp_path, global_config_path=global_cfg)
    assert cfg.codec.mode == "yaml"
    # Deep merge keeps the untouched global section
    assert cfg.nesting.parent == "vendors"


def test_load_config_partial_section_keeps_defaults(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "catalogdb.yaml", {"lookup": {"dir": "tables"}})

    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)
    assert cfg.lookup.dir == "tables"
    assert cfg.lookup.tables == sorted(DEFAULT_LOOKUP_TABLES)
    assert cfg.lookup_path == tmp_path / "tables"


def test_load_config_relative_base_dir(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "catalogdb.yaml", {"data": {"base_dir": "catalog"}})

    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)
    assert cfg.base_path == tmp_path / "catalog"


def test_load_config_absolute_base_dir(tmp_path: Path, no_global: Path) -> None:
    target = tmp_path / "elsewhere"
    _write_yaml(tmp_path / "catalogdb.yaml", {"data": {"base_dir": str(target)}})

    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)
    assert cfg.base_path == target


def test_load_config_custom_roots(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(
        tmp_path / "catalogdb.yaml",
        {"data": {"roots": ["records"], "primary": ["records"]}},
    )

    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)
    assert cfg.data.roots == ["records"]
    assert cfg.data.primary == ["records"]


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------


def test_env_overrides_project_file(
    tmp_path: Path, no_global: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _write_yaml(tmp_path / "catalogdb.yaml", {"codec": {"mode": "yaml"}})
    monkeypatch.setenv("CATALOGDB_CODEC", "fallback")
    monkeypatch.setenv("CATALOGDB_BASE_DIR", str(tmp_path / "env-base"))
    monkeypatch.setenv("CATALOGDB_LOOKUP_DIR", "lk")

    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)
    assert cfg.codec.mode == "fallback"
    assert cfg.base_path == tmp_path / "env-base"
    assert cfg.lookup_path == tmp_path / "env-base" / "lk"


def test_env_invalid_codec_rejected(
    tmp_path: Path, no_global: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CATALOGDB_CODEC", "toml")
    with pytest.raises(ConfigError, match="codec.mode"):
        load_config(project_dir=tmp_path, global_config_path=no_global)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def test_unknown_top_level_key_warns(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "catalogdb.yaml", {"embedding": {"model": "x"}})

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        load_config(project_dir=tmp_path, global_config_path=no_global)

    assert any("Unknown config key 'embedding'" in str(w.message) for w in caught)


def test_invalid_codec_mode(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "catalogdb.yaml", {"codec": {"mode": "json"}})
    with pytest.raises(ConfigError, match="auto, fallback, yaml"):
        load_config(project_dir=tmp_path, global_config_path=no_global)


def test_lookup_table_path_rejected(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "catalogdb.yaml", {"lookup": {"tables": ["../secrets"]}})
    with pytest.raises(ConfigError, match="plain table name"):
        load_config(project_dir=tmp_path, global_config_path=no_global)


def test_roots_must_be_list(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "catalogdb.yaml", {"data": {"roots": "data"}})
    with pytest.raises(ConfigError, match="data.roots"):
        load_config(project_dir=tmp_path, global_config_path=no_global)


def test_non_mapping_file(tmp_path: Path, no_global: Path) -> None:
    (tmp_path / "catalogdb.yaml").write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(project_dir=tmp_path, global_config_path=no_global)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def test_open_store_uses_config(tmp_path: Path, no_global: Path) -> None:
    (tmp_path / "data" / "vendors").mkdir(parents=True)
    _write_yaml(
        tmp_path / "catalogdb.yaml",
        {"nesting": {"parent": "vendors"}, "codec": {"mode": "fallback"}},
    )

    store = load_config(project_dir=tmp_path, global_config_path=no_global).open_store()
    assert store.parent_key == "vendor"
    assert isinstance(store.codec, FallbackCodec)
    assert store.resolver.find_root("vendors") == (tmp_path / "data" / "vendors").resolve()


def test_open_lookup_uses_config(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "catalogdb.yaml", {"lookup": {"dir": "lk", "tables": ["countries"]}})

    tables = load_config(project_dir=tmp_path, global_config_path=no_global).open_lookup()
    assert tables.list() == ["countries"]
    assert tables.lookup_dir == tmp_path / "lk"
