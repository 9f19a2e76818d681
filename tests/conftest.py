"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from catalogdb.store.codec import select_codec
from catalogdb.store.paths import DirectoryResolver
from catalogdb.store.records import RecordStore

PRUSAMENT_UUID = "ae5ff34e-298e-50c9-8f77-92a97fb30b09"
FIBERLOGY_UUID = "1b1c7e8a-5c5b-5b5e-9f4f-2d8b8d1f0c11"


def write_doc(path: Path, data: Any) -> Path:
    """Write *data* as YAML to *path*, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """A small catalog tree under tmp_path/data.

    brands/
      prusament.yaml            slug == stem
      fiberlogy-brand.yaml      slug "fiberlogy" != stem
    materials/
      prusament/pla-galaxy-black.yaml
      prusament/petg-orange.yml
      fiberlogy/easy-pla.yaml
    material-containers/
      spool-1kg.yaml
    """
    data = tmp_path / "data"
    write_doc(
        data / "brands" / "prusament.yaml",
        {"uuid": PRUSAMENT_UUID, "slug": "prusament", "name": "Prusament"},
    )
    write_doc(
        data / "brands" / "fiberlogy-brand.yaml",
        {"uuid": FIBERLOGY_UUID, "slug": "fiberlogy", "name": "Fiberlogy S.A."},
    )
    write_doc(
        data / "materials" / "prusament" / "pla-galaxy-black.yaml",
        {
            "uuid": "0e3a3c3e-1111-4222-8333-444455556666",
            "slug": "pla-galaxy-black",
            "name": "Prusament PLA Galaxy Black",
            "type": "PLA",
        },
    )
    write_doc(
        data / "materials" / "prusament" / "petg-orange.yml",
        {"slug": "petg-orange", "name": "Prusament PETG Orange", "type": "PETG"},
    )
    write_doc(
        data / "materials" / "fiberlogy" / "easy-pla.yaml",
        {"slug": "easy-pla", "name": "Easy PLA", "type": "PLA"},
    )
    write_doc(
        data / "material-containers" / "spool-1kg.yaml",
        {"uuid": "9d8c7b6a-0000-4000-8000-000000000001", "slug": "spool-1kg", "name": "Spool 1kg"},
    )
    return tmp_path


@pytest.fixture
def store(catalog_dir: Path) -> RecordStore:
    """RecordStore over catalog_dir using the PyYAML codec."""
    return RecordStore(DirectoryResolver(catalog_dir), select_codec("yaml"))
